"""
Shared fakes for provider collaborators.
"""

from __future__ import annotations

from typing import List, Optional

import pytest

from delegator.rag import QARecord, StoreHit


class FakeLLMClient:
    """Stands in for CompletionClient: canned router reply and streamed fragments."""

    def __init__(
        self,
        reply: str | Exception = "",
        fragments: Optional[List[str]] = None,
        stream_error: Optional[Exception] = None,
        calls: Optional[list] = None,
    ) -> None:
        self.reply = reply
        self.fragments = list(fragments) if fragments is not None else ["Hello", " world"]
        self.stream_error = stream_error
        self.prompts: List[str] = []
        self.stream_prompts: List[str] = []
        self.calls = calls if calls is not None else []

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply

    def stream(self, prompt: str):
        self.stream_prompts.append(prompt)
        self.calls.append("stream")
        for fragment in self.fragments:
            yield fragment
        if self.stream_error is not None:
            raise self.stream_error


class FakeStore:
    """Knowledge store with fixed hits and records."""

    def __init__(
        self,
        hits: Optional[List[StoreHit]] = None,
        records: Optional[List[QARecord]] = None,
        search_error: Optional[Exception] = None,
        scan_error: Optional[Exception] = None,
    ) -> None:
        self.hits = hits or []
        self.records = records or []
        self.search_error = search_error
        self.scan_error = scan_error
        self.scan_limits: List[int] = []
        self.search_k: List[int] = []

    def nearest_neighbors(self, text: str, k: int) -> List[StoreHit]:
        self.search_k.append(k)
        if self.search_error is not None:
            raise self.search_error
        return self.hits[:k]

    def scan_all(self, limit: int) -> List[QARecord]:
        self.scan_limits.append(limit)
        if self.scan_error is not None:
            raise self.scan_error
        return self.records[:limit]


def make_record(
    rid: str,
    source_id: str,
    question: str = "Question?",
    answer: str = "Answer.",
    pages: Optional[List[str]] = None,
) -> QARecord:
    return QARecord(
        id=rid,
        source_id=source_id,
        question=question,
        answer=answer,
        pages=list(pages) if pages is not None else ["1"],
    )


def make_hit(record: QARecord, distance: float) -> StoreHit:
    return StoreHit(id=record.id, distance=distance, record=record)


@pytest.fixture
def handbook_hits() -> List[StoreHit]:
    """Three relevant hits from two sources plus one beyond the threshold."""
    return [
        make_hit(make_record("r1", "handbook", "Vacation days?", "25 days per year.", ["4"]), 0.12),
        make_hit(make_record("r2", "sales-q3", "Q3 sales?", "4.2 million.", ["2"]), 0.20),
        make_hit(make_record("r3", "handbook", "Carry over?", "Up to 5 days.", ["4", "5"]), 0.31),
        make_hit(make_record("r4", "manual", "Reset?", "Hold power.", ["12"]), 0.80),
    ]
