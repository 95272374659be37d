"""
Orchestrator: routing, route execution, aggregation and event streaming.
"""

from .agent import AgentResponse, DelegatingAgent, wants_sequential
from .aggregator import RAGResult, combine
from .memory import ConversationMemory, Turn
from .router import Classification, Fallback, Parsed, Router, classify_response

__all__ = [
    "AgentResponse",
    "Classification",
    "classify_response",
    "combine",
    "ConversationMemory",
    "DelegatingAgent",
    "Fallback",
    "Parsed",
    "RAGResult",
    "Router",
    "Turn",
    "wants_sequential",
]
