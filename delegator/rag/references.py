"""
Group retrieval hits by source document and format citations.

Ordinals are assigned in first-seen source order: the first source becomes 1,
the next new source 2, and so on.
"""

from __future__ import annotations

from typing import Dict, Iterable, List

from delegator.types import RetrievalReference

from .index import QARecord


def group_references_by_source(records: Iterable[QARecord]) -> List[RetrievalReference]:
    """Merge records from the same source: pages deduplicated, answers concatenated."""
    by_source: Dict[str, RetrievalReference] = {}
    for rec in records:
        ref = by_source.get(rec.source_id)
        if ref is None:
            by_source[rec.source_id] = RetrievalReference(
                source_id=rec.source_id,
                display_ordinal=len(by_source) + 1,
                pages=list(dict.fromkeys(rec.pages)),
                content=rec.answer or None,
            )
            continue
        for page in rec.pages:
            if page not in ref.pages:
                ref.pages.append(page)
        if rec.answer and rec.answer not in (ref.content or ""):
            ref.content = f"{ref.content}\n{rec.answer}" if ref.content else rec.answer
    return list(by_source.values())


def _pages_label(pages: List[str]) -> str:
    if not pages:
        return "Page n/a"
    if len(pages) == 1:
        return f"Page {pages[0]}"
    return f"Pages {', '.join(pages)}"


def format_sources(references: List[RetrievalReference]) -> str:
    """Inline citation string, e.g. '1- Page 3 2- Pages 4, 5'."""
    return " ".join(f"{r.display_ordinal}- {_pages_label(r.pages)}" for r in references)


def format_references(references: List[RetrievalReference]) -> str:
    """Multi-line listing for terminal output."""
    if not references:
        return ""
    lines = [
        f"[{r.display_ordinal}] File {r.source_id} - {_pages_label(r.pages)}"
        for r in references
    ]
    return "References:\n" + "\n".join(lines)
