"""
Delegating agent: routes a query, runs the matching executor(s) and streams ordered events.

Event order for one query:
    thinking, route, <route events>, done
or, on any failure, the events produced so far followed by a single error.

Route events:
    retrieval  references?, token*, sources?
    both       references?, token*, sources?, chart
    chart      chart, token
    image      image, token
    direct     token*
"""

from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generator, Iterator, List, Optional, Union

from delegator.errors import RouteExecutionError
from delegator.generation.prompts import DIRECT_PROMPT
from delegator.rag.references import format_sources
from delegator.rag.retriever import Retriever
from delegator.tools.chart import ChartTool
from delegator.tools.image import ImageTool
from delegator.types import (
    AggregatedResult,
    EventType,
    Query,
    ReferenceItem,
    Route,
    RouteDecision,
    StreamEvent,
)

from .aggregator import CHART_ONLY_ANSWER, RAGResult, combine
from .memory import ConversationMemory
from .router import Router

logger = logging.getLogger(__name__)

SEQUENCING_CUE_RE = re.compile(r"\b(then|after|first|next)\b", re.I)
IMAGE_CONFIRMATION = "Here is the generated image for: {prompt}"

EventGen = Generator[StreamEvent, None, AggregatedResult]


class Stage(str, Enum):
    START = "start"
    ROUTING = "routing"
    EXECUTING = "executing"
    AGGREGATING = "aggregating"


@dataclass
class AgentResponse:
    """Collected result of a non-streaming run."""

    answer: str
    references: List[ReferenceItem] = field(default_factory=list)
    decision: Optional[RouteDecision] = None


def wants_sequential(text: str) -> bool:
    """True when the query asks for one step after another (then/after/first/next)."""
    return bool(SEQUENCING_CUE_RE.search(text or ""))


def _error_message(error: BaseException) -> str:
    detail = str(error) or type(error).__name__
    return f"Error processing query: {detail}"


class DelegatingAgent:
    """Routes queries to retrieval, chart, image or direct answering."""

    def __init__(
        self,
        client: Any,
        retriever: Retriever,
        chart_tool: ChartTool,
        image_tool: ImageTool,
        router: Optional[Router] = None,
        memory: Optional[ConversationMemory] = None,
    ):
        self.client = client
        self.retriever = retriever
        self.chart_tool = chart_tool
        self.image_tool = image_tool
        self.router = router or Router(client)
        self.memory = memory

    def _to_query(self, query: Union[Query, str]) -> Query:
        if isinstance(query, Query):
            return query
        history = self.memory.get_history() if self.memory is not None else ()
        return Query(text=query, history=tuple(history))

    def stream(self, query: Union[Query, str]) -> Iterator[StreamEvent]:
        """Yield events for one query. The last event is always done or error."""
        query = self._to_query(query)
        stage = Stage.START
        try:
            yield StreamEvent.thinking()
            stage = Stage.ROUTING
            decision = self.router.decide(query)
            yield StreamEvent.route(decision)
            stage = Stage.EXECUTING
            result = yield from self._execute(decision.primary, query)
            stage = Stage.AGGREGATING
        except Exception as e:
            logger.exception("Query failed during %s", stage.value)
            yield StreamEvent.error(_error_message(e))
            return
        if self.memory is not None:
            self.memory.add_turn(query.text, result.final_answer)
        logger.debug("Query finished with %s references", len(result.references))
        yield StreamEvent.done(result)

    def answer(self, query: Union[Query, str]) -> AgentResponse:
        """Run the same event sequence to completion and return the collected tokens and references."""
        parts: List[str] = []
        decision: Optional[RouteDecision] = None
        for event in self.stream(query):
            if event.type is EventType.TOKEN:
                parts.append(event.data)
            elif event.type is EventType.ROUTE:
                decision = event.data
            elif event.type is EventType.DONE:
                return AgentResponse(
                    answer="".join(parts),
                    references=list(event.data.references),
                    decision=decision,
                )
            elif event.type is EventType.ERROR:
                raise RouteExecutionError(event.data)
        raise RouteExecutionError("Event stream ended without a terminal event")

    def _execute(self, route: Route, query: Query) -> EventGen:
        if route is Route.RETRIEVAL:
            rag = yield from self._run_retrieval(query)
            return combine(retrieval=rag)
        if route is Route.BOTH:
            return (yield from self._run_both(query))
        if route is Route.CHART:
            return (yield from self._run_chart(query))
        if route is Route.IMAGE:
            return (yield from self._run_image(query))
        return (yield from self._run_direct(query))

    def _stream_tokens(self, prompt: str, parts: List[str]) -> Iterator[StreamEvent]:
        for fragment in self.client.stream(prompt):
            parts.append(fragment)
            yield StreamEvent.token(fragment)

    def _run_retrieval(self, query: Query) -> Generator[StreamEvent, None, RAGResult]:
        output = self.retriever.search(query.text)
        if output.references:
            yield StreamEvent.references(output.references)
        parts: List[str] = []
        yield from self._stream_tokens(output.prompt, parts)
        if output.references:
            yield StreamEvent.sources(format_sources(output.references))
        return RAGResult(answer="".join(parts), references=output.references)

    def _run_both(self, query: Query) -> EventGen:
        if wants_sequential(query.text):
            rag = yield from self._run_retrieval(query)
            chart = self.chart_tool.generate(query.text)
        else:
            executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="chart")
            try:
                future = executor.submit(self.chart_tool.generate, query.text)
                rag = yield from self._run_retrieval(query)
                chart = future.result()
            finally:
                executor.shutdown(wait=False)
        yield StreamEvent.chart(chart)
        return combine(retrieval=rag, chart=chart)

    def _run_chart(self, query: Query) -> EventGen:
        chart = self.chart_tool.generate(query.text)
        yield StreamEvent.chart(chart)
        yield StreamEvent.token(CHART_ONLY_ANSWER)
        return combine(chart=chart)

    def _run_image(self, query: Query) -> EventGen:
        image = self.image_tool.generate(query.text, query.image_url)
        yield StreamEvent.image(image)
        confirmation = IMAGE_CONFIRMATION.format(prompt=query.text)
        yield StreamEvent.token(confirmation)
        return combine(direct_answer=confirmation, image=image)

    def _run_direct(self, query: Query) -> EventGen:
        parts: List[str] = []
        yield from self._stream_tokens(DIRECT_PROMPT.format(query=query.text), parts)
        return combine(direct_answer="".join(parts))
