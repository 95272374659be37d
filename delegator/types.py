"""
Data model for routed queries: routes, decisions, references, results and stream events.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple, Union

MAX_HISTORY_TURNS = 10


class Route(str, Enum):
    """Backend(s) selected to answer a query."""

    RETRIEVAL = "retrieval"
    CHART = "chart"
    IMAGE = "image"
    DIRECT = "direct"
    BOTH = "both"


class ChartKind(str, Enum):
    BAR = "bar"
    LINE = "line"
    PIE = "pie"
    DOUGHNUT = "doughnut"


@dataclass(frozen=True)
class Query:
    """A single request. history holds at most the last MAX_HISTORY_TURNS turns."""

    text: str
    image_url: Optional[str] = None
    history: Tuple[dict, ...] = ()

    def __post_init__(self) -> None:
        turns = tuple(self.history or ())[-MAX_HISTORY_TURNS:]
        object.__setattr__(self, "history", turns)

    @property
    def has_image(self) -> bool:
        return bool(self.image_url)


@dataclass(frozen=True)
class RouteDecision:
    """Routing outcome; labels[0] is the primary route."""

    labels: Tuple[Route, ...]
    rationale: str = ""

    def __post_init__(self) -> None:
        if not self.labels:
            raise ValueError("RouteDecision requires at least one label")
        if Route.BOTH in self.labels and len(self.labels) != 1:
            raise ValueError("'both' is only valid as a single-element decision")

    @property
    def primary(self) -> Route:
        return self.labels[0]

    def to_dict(self) -> dict:
        return {"tools": [r.value for r in self.labels], "reasoning": self.rationale}


@dataclass
class RetrievalReference:
    """Knowledge-base source cited in an answer."""

    source_id: str
    display_ordinal: int
    pages: List[str] = field(default_factory=list)
    content: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "type": "retrieval",
            "source_id": self.source_id,
            "display_ordinal": self.display_ordinal,
            "pages": list(self.pages),
            "content": self.content,
        }


@dataclass
class ChartReference:
    """Chart.js style configuration: type plus data.labels and data.datasets."""

    kind: ChartKind
    config: dict

    def to_dict(self) -> dict:
        return {"type": "chart", "kind": self.kind.value, "config": self.config}


@dataclass
class ImageReference:
    url: str
    prompt: str
    model: str

    def to_dict(self) -> dict:
        return {"type": "image", "url": self.url, "prompt": self.prompt, "model": self.model}


ReferenceItem = Union[RetrievalReference, ChartReference, ImageReference]


@dataclass
class AggregatedResult:
    """Final answer and ordered references for one query."""

    final_answer: str
    references: List[ReferenceItem] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "answer": self.final_answer,
            "references": [r.to_dict() for r in self.references],
        }


class EventType(str, Enum):
    THINKING = "thinking"
    ROUTE = "route"
    TOKEN = "token"
    REFERENCES = "references"
    CHART = "chart"
    IMAGE = "image"
    SOURCES = "sources"
    DONE = "done"
    ERROR = "error"


TERMINAL_EVENTS = (EventType.DONE, EventType.ERROR)


@dataclass(frozen=True)
class StreamEvent:
    """
    One event of the orchestrator's output stream.

    data by type:
        thinking   -> None
        route      -> RouteDecision
        token      -> str
        references -> List[RetrievalReference]
        chart      -> ChartReference
        image      -> ImageReference
        sources    -> str
        done       -> AggregatedResult
        error      -> str
    """

    type: EventType
    data: Any = None

    @property
    def is_terminal(self) -> bool:
        return self.type in TERMINAL_EVENTS

    def to_dict(self) -> dict:
        data = self.data
        if isinstance(data, list):
            data = [item.to_dict() for item in data]
        elif hasattr(data, "to_dict"):
            data = data.to_dict()
        return {"type": self.type.value, "data": data}

    @classmethod
    def thinking(cls) -> "StreamEvent":
        return cls(EventType.THINKING)

    @classmethod
    def route(cls, decision: RouteDecision) -> "StreamEvent":
        return cls(EventType.ROUTE, decision)

    @classmethod
    def token(cls, text: str) -> "StreamEvent":
        return cls(EventType.TOKEN, text)

    @classmethod
    def references(cls, refs: List[RetrievalReference]) -> "StreamEvent":
        return cls(EventType.REFERENCES, list(refs))

    @classmethod
    def chart(cls, ref: ChartReference) -> "StreamEvent":
        return cls(EventType.CHART, ref)

    @classmethod
    def image(cls, ref: ImageReference) -> "StreamEvent":
        return cls(EventType.IMAGE, ref)

    @classmethod
    def sources(cls, text: str) -> "StreamEvent":
        return cls(EventType.SOURCES, text)

    @classmethod
    def done(cls, result: AggregatedResult) -> "StreamEvent":
        return cls(EventType.DONE, result)

    @classmethod
    def error(cls, message: str) -> "StreamEvent":
        return cls(EventType.ERROR, message)
