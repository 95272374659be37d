"""
Keyword-overlap relevance check used when semantic search is unavailable.

This is a rough substring heuristic, not a ranking.
"""

from __future__ import annotations

from typing import List

STOP_WORDS = frozenset(
    {
        "what", "is", "the", "a", "an", "of", "to", "in", "for", "are", "how", "why",
        "when", "where", "who", "does", "do", "can", "could", "would", "should", "about",
        "that", "this", "with", "from", "have", "has", "been", "was", "were", "will", "be",
        "and", "or", "but", "not", "it", "its", "they", "them", "their", "you", "your",
        "me", "my", "we", "our",
    }
)


def query_keywords(query: str) -> List[str]:
    """Lowercased whitespace tokens with stop words and 1-char tokens removed."""
    return [w for w in query.lower().split() if len(w) >= 2 and w not in STOP_WORDS]


def is_relevant(query: str, question: str, answer: str) -> bool:
    """True when any query keyword appears as a substring of question + answer."""
    combined = f"{question or ''} {answer or ''}".lower()
    return any(word in combined for word in query_keywords(query))
