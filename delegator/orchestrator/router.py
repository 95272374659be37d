"""
Router: picks the route(s) for a query.

An attached image always routes to the image tool. Otherwise the completion model
is asked for a JSON decision; when its reply cannot be parsed, a keyword fallback
on the reply and the query decides instead.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, List, Optional, Union

from delegator.errors import ClassificationParseError
from delegator.generation.prompts import ROUTER_PROMPT, format_history
from delegator.types import Query, Route, RouteDecision

logger = logging.getLogger(__name__)

IMAGE_ATTACHED_RATIONALE = "image attached by caller"

_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*(\{.*\})\s*```", re.DOTALL)
_ARITHMETIC_RE = re.compile(r"\d+\s*[+\-*/]\s*\d+")

_LABEL_ALIASES = {
    "rag": Route.RETRIEVAL,
    "retrieval": Route.RETRIEVAL,
    "chart": Route.CHART,
    "image": Route.IMAGE,
    "direct": Route.DIRECT,
    "both": Route.BOTH,
}


@dataclass(frozen=True)
class Parsed:
    """The model returned a usable JSON decision."""

    decision: RouteDecision


@dataclass(frozen=True)
class Fallback:
    """The model reply was unparsable; the keyword fallback decided."""

    decision: RouteDecision


Classification = Union[Parsed, Fallback]


def extract_json_object(raw: str) -> dict[str, Any]:
    """Parse a JSON object from raw model text, accepting a fenced ```json block."""
    text = (raw or "").strip()
    if not text:
        raise ClassificationParseError("empty router response")
    candidates = [text]
    fenced = _JSON_FENCE_RE.search(text)
    if fenced:
        candidates.insert(0, fenced.group(1))
    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except ValueError:
            continue
        if isinstance(parsed, dict):
            return parsed
    raise ClassificationParseError(f"router response is not a JSON object: {text[:80]!r}")


def normalize_labels(tools: Any) -> List[Route]:
    """Ordered, deduplicated routes; defaults to [retrieval] when nothing usable is left."""
    if tools is None or tools == "" or tools == []:
        raw: List[Any] = []
    elif isinstance(tools, (list, tuple)):
        raw = list(tools)
    else:
        raw = [tools]

    labels: List[Route] = []
    for item in raw:
        route = _LABEL_ALIASES.get(str(item).strip().lower())
        if route is not None and route not in labels:
            labels.append(route)

    if labels and labels[0] is Route.BOTH:
        return [Route.BOTH]
    labels = [r for r in labels if r is not Route.BOTH]
    return labels or [Route.RETRIEVAL]


def fallback_decision(response: str, query: str) -> RouteDecision:
    lowered = (response or "").lower()
    if "image" in lowered:
        return RouteDecision((Route.IMAGE,), "Reply mentions image generation")
    if "chart" in lowered:
        return RouteDecision((Route.CHART,), "Query mentions visualization")
    if "direct" in lowered or _ARITHMETIC_RE.search(query or ""):
        return RouteDecision((Route.DIRECT,), "Math/code task")
    return RouteDecision((Route.RETRIEVAL,), "Informational query - checking knowledge base")


def classify_response(response: str, query: str) -> Classification:
    """Turn a router reply into Parsed or Fallback."""
    try:
        payload = extract_json_object(response)
    except ClassificationParseError as e:
        logger.warning("Router reply unparsable (%s); using keyword fallback", e)
        return Fallback(fallback_decision(response, query))
    labels = normalize_labels(payload.get("tools"))
    reasoning = str(payload.get("reasoning") or "Routed by LLM")
    return Parsed(RouteDecision(tuple(labels), reasoning))


class Router:
    """Decides which route answers a query."""

    def __init__(self, client: Any):
        self.client = client

    def build_prompt(self, query: Query) -> str:
        return ROUTER_PROMPT.format(query=query.text, history=format_history(query.history))

    def classify(self, query: Query) -> Classification:
        response = self.client.complete(self.build_prompt(query))
        return classify_response(response, query.text)

    def decide(self, query: Query, has_attached_image: Optional[bool] = None) -> RouteDecision:
        if has_attached_image is None:
            has_attached_image = query.has_image
        if has_attached_image:
            decision = RouteDecision((Route.IMAGE,), IMAGE_ATTACHED_RATIONALE)
        else:
            decision = self.classify(query).decision
        logger.info(
            "Routing: %s (%s)",
            ", ".join(r.value for r in decision.labels),
            decision.rationale,
        )
        return decision
