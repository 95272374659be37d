"""
Loading utilities for the question/answer knowledge records.
"""

from __future__ import annotations

import dataclasses
import json
import os
from pathlib import Path
from typing import List


ROOT = Path(__file__).resolve().parents[2]
KNOWLEDGE_PATH = Path(os.getenv("KNOWLEDGE_PATH", str(ROOT / "data" / "knowledge.jsonl")))


@dataclasses.dataclass
class QARecord:
    """A question/answer pair extracted from one source document."""

    id: str
    source_id: str
    question: str
    answer: str
    pages: List[str] = dataclasses.field(default_factory=list)

    @property
    def text(self) -> str:
        return f"{self.question} {self.answer}"


def load_records(path: Path | None = None) -> List[QARecord]:
    """Load records from a JSONL file with id, source_id, question, answer, pages."""
    if path is None:
        path = KNOWLEDGE_PATH
    if not path.exists():
        raise FileNotFoundError(f"knowledge file not found at {path}")

    records: List[QARecord] = []
    with path.open("r", encoding="utf-8") as f:
        for i, line in enumerate(f):
            line = line.strip()
            if not line:
                continue
            obj = json.loads(line)
            records.append(
                QARecord(
                    id=str(obj.get("id") or f"record_{i}"),
                    source_id=str(obj["source_id"]),
                    question=obj.get("question", ""),
                    answer=obj.get("answer", ""),
                    pages=[str(p) for p in obj.get("pages", [])],
                )
            )
    return records

