"""
Retrieval route over a question/answer knowledge base.

- Semantic nearest-neighbour search with a distance threshold
- Keyword-overlap fallback when the store cannot search
- Source grouping with dense display ordinals
"""

from .config import RAGConfig
from .index import QARecord, load_records
from .keyword import STOP_WORDS, is_relevant, query_keywords
from .references import format_references, format_sources, group_references_by_source
from .retriever import RetrievalOutput, RetrievalResult, Retriever, build_context
from .store import DenseKnowledgeStore, KnowledgeStore, StoreHit

__all__ = [
    "build_context",
    "DenseKnowledgeStore",
    "format_references",
    "format_sources",
    "group_references_by_source",
    "is_relevant",
    "KnowledgeStore",
    "load_records",
    "QARecord",
    "query_keywords",
    "RAGConfig",
    "RetrievalOutput",
    "RetrievalResult",
    "Retriever",
    "STOP_WORDS",
    "StoreHit",
]
