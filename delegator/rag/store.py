"""
Knowledge store interface and a dense in-memory implementation using sentence-transformers.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, List, Protocol

import numpy as np

from delegator.errors import ProviderUnavailableError

from .index import QARecord

logger = logging.getLogger(__name__)

EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "all-MiniLM-L6-v2")


@dataclass
class StoreHit:
    """A candidate record with its cosine distance to the query (0 = identical)."""

    id: str
    distance: float
    record: QARecord


class KnowledgeStore(Protocol):
    """Protocol for knowledge stores queried by the retrieval route."""

    def nearest_neighbors(self, text: str, k: int) -> List[StoreHit]:
        """Return up to k hits ordered by ascending distance. Raises on provider failure."""
        ...

    def scan_all(self, limit: int) -> List[QARecord]:
        """Return up to limit records without ranking. Raises on provider failure."""
        ...


@dataclass
class DenseKnowledgeStore:
    """Cosine-distance search over record embeddings held in memory."""

    model: Any
    embeddings: np.ndarray  # shape: (n_records, dim), L2-normalized
    records: List[QARecord]

    @classmethod
    def from_records(cls, records: List[QARecord], model: Any = None) -> "DenseKnowledgeStore":
        """Embed question + answer text of every record."""
        if model is None:
            from sentence_transformers import SentenceTransformer

            model = SentenceTransformer(EMBEDDING_MODEL)
        if records:
            emb = model.encode(
                [r.text for r in records],
                batch_size=64,
                convert_to_numpy=True,
                normalize_embeddings=True,
            )
        else:
            emb = np.zeros((0, 0), dtype=np.float32)
        return cls(model=model, embeddings=np.asarray(emb), records=list(records))

    def nearest_neighbors(self, text: str, k: int) -> List[StoreHit]:
        if not self.records:
            return []
        try:
            q_emb = self.model.encode(
                [text],
                convert_to_numpy=True,
                normalize_embeddings=True,
            )[0]
        except Exception as e:
            raise ProviderUnavailableError(f"Embedding the query failed: {e}") from e
        sims = np.dot(self.embeddings, q_emb)
        idxs = np.argsort(-sims)[:k]
        hits: List[StoreHit] = []
        for idx in idxs:
            rec = self.records[int(idx)]
            hits.append(StoreHit(id=rec.id, distance=float(1.0 - sims[idx]), record=rec))
        return hits

    def scan_all(self, limit: int) -> List[QARecord]:
        return self.records[:limit]
