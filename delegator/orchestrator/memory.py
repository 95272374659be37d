"""
In-memory conversation memory for follow-up context.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from delegator.types import MAX_HISTORY_TURNS


@dataclass
class Turn:
    """Single conversation turn."""

    query: str
    answer: str


class ConversationMemory:
    """In-memory list of turns; the last N are handed to the router as history."""

    def __init__(self, max_turns: int = MAX_HISTORY_TURNS):
        self._turns: List[Turn] = []
        self.max_turns = max_turns

    def add_turn(self, query: str, answer: str) -> None:
        self._turns.append(Turn(query=query, answer=answer))
        if len(self._turns) > self.max_turns:
            self._turns = self._turns[-self.max_turns :]

    def get_history(self, last_n: int = MAX_HISTORY_TURNS) -> List[dict]:
        """Return last N turns as list of dicts, oldest first."""
        if not self._turns:
            return []
        turns = self._turns[-last_n:]
        return [{"query": t.query, "answer": t.answer} for t in turns]

    def __len__(self) -> int:
        return len(self._turns)

    def clear(self) -> None:
        self._turns.clear()
