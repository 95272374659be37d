"""
Retrieval route: semantic search with a keyword fallback, grouped references and
the prompt the orchestrator streams the answer from.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from delegator.errors import ProviderUnavailableError
from delegator.generation.prompts import GENERAL_PROMPT, GROUNDED_PROMPT
from delegator.types import RetrievalReference

from .config import RAGConfig
from .index import QARecord
from .keyword import is_relevant
from .references import group_references_by_source
from .store import KnowledgeStore

logger = logging.getLogger(__name__)


@dataclass
class RetrievalResult:
    """A record that survived filtering, with the distance it was accepted at."""

    record: QARecord
    distance: float
    source: str  # "semantic" or "keyword"


@dataclass
class RetrievalOutput:
    """Everything the orchestrator needs to stream a retrieval answer."""

    hits: List[RetrievalResult]
    references: List[RetrievalReference]
    context: str
    prompt: str
    used_fallback: bool = False


def build_context(hits: List[RetrievalResult]) -> str:
    """Concatenate hits as Q/A blocks."""
    return "\n\n".join(f"Q: {h.record.question}\nA: {h.record.answer}" for h in hits)


class Retriever:
    """Runs the retrieval route against a knowledge store."""

    def __init__(self, store: KnowledgeStore, config: Optional[RAGConfig] = None):
        self.store = store
        self.config = config or RAGConfig()

    def _semantic(self, query: str) -> List[RetrievalResult]:
        hits = self.store.nearest_neighbors(query, self.config.top_k)
        return [
            RetrievalResult(record=h.record, distance=h.distance, source="semantic")
            for h in hits
            if h.distance < self.config.distance_threshold
        ]

    def _keyword_fallback(self, query: str) -> List[RetrievalResult]:
        try:
            records = self.store.scan_all(self.config.fallback_scan_limit)
        except Exception as e:
            raise ProviderUnavailableError(f"Knowledge store unavailable: {e}") from e
        return [
            RetrievalResult(record=r, distance=0.0, source="keyword")
            for r in records
            if is_relevant(query, r.question, r.answer)
        ]

    def search(self, query: str) -> RetrievalOutput:
        used_fallback = False
        try:
            hits = self._semantic(query)
        except Exception as e:
            logger.warning("Semantic search failed (%s); falling back to keyword scan", e)
            used_fallback = True
            hits = self._keyword_fallback(query)

        if hits:
            logger.info(
                "Found %s relevant results%s",
                len(hits),
                " (keyword fallback)" if used_fallback else "",
            )
        else:
            logger.info("Not found in knowledge base; answering from general knowledge")

        references = group_references_by_source(h.record for h in hits)
        context = build_context(hits)
        if hits:
            prompt = GROUNDED_PROMPT.format(query=query, context=context)
        else:
            prompt = GENERAL_PROMPT.format(query=query)
        return RetrievalOutput(
            hits=hits,
            references=references,
            context=context,
            prompt=prompt,
            used_fallback=used_fallback,
        )
