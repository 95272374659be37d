"""
Combine route outputs into the final answer and the ordered reference list.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from delegator.types import (
    AggregatedResult,
    ChartReference,
    ImageReference,
    ReferenceItem,
    RetrievalReference,
)

CHART_INCLUDED_MARKER = "\n\n[Chart configuration included in data]"
CHART_ONLY_ANSWER = "Here is the requested chart configuration."


@dataclass
class RAGResult:
    """Answer text streamed for the retrieval route, with its references."""

    answer: str
    references: List[RetrievalReference] = field(default_factory=list)


def combine(
    retrieval: Optional[RAGResult] = None,
    chart: Optional[ChartReference] = None,
    direct_answer: Optional[str] = None,
    image: Optional[ImageReference] = None,
) -> AggregatedResult:
    """
    Retrieval text is the base answer. A chart appends a marker to it, or supplies a
    placeholder when there is no retrieval text. Otherwise the direct answer is used.
    References are always retrieval first, then chart, then image.
    """
    answer = ""
    references: List[ReferenceItem] = []

    if retrieval is not None:
        answer = retrieval.answer
        references.extend(retrieval.references)

    if chart is not None:
        references.append(chart)
        if answer:
            answer += CHART_INCLUDED_MARKER
        else:
            answer = CHART_ONLY_ANSWER

    if not answer and direct_answer:
        answer = direct_answer

    if image is not None:
        references.append(image)

    return AggregatedResult(final_answer=answer, references=references)
