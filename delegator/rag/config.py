"""
Configuration for the retrieval route.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class RAGConfig:
    """Configuration for knowledge-base retrieval."""

    top_k: int = 5
    # Candidates are kept only when distance < threshold.
    distance_threshold: float = 0.45
    fallback_scan_limit: int = 10
