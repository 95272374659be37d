"""
Build the delegating agent for the API (used in lifespan).
"""

from __future__ import annotations

import logging

from delegator.llm import create_client
from delegator.orchestrator import DelegatingAgent
from delegator.rag import DenseKnowledgeStore, QARecord, RAGConfig, Retriever, load_records
from delegator.tools import ChartTool, ImageTool

logger = logging.getLogger(__name__)


def build_agent():
    """
    Load knowledge records, build the store, LLM client, tools and agent.
    Returns (agent, num_records).
    """
    try:
        records: list[QARecord] = load_records()
    except FileNotFoundError as e:
        logger.warning("%s; retrieval will answer from general knowledge only", e)
        records = []
    store = DenseKnowledgeStore.from_records(records)
    retriever = Retriever(store, RAGConfig())
    chart_tool = ChartTool.from_file()
    client = create_client()
    agent = DelegatingAgent(
        client=client,
        retriever=retriever,
        chart_tool=chart_tool,
        image_tool=ImageTool(),
    )
    return agent, len(records)
