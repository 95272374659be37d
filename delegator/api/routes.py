"""
API routes: chat (buffered and streamed), health, conversation reset.
"""

from __future__ import annotations

import asyncio
import json
import queue
import threading
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, StreamingResponse

from delegator.errors import DelegatorError
from delegator.orchestrator import ConversationMemory
from delegator.types import EventType, Query

from .models import ChatRequest, ChatResponse, HealthResponse

router = APIRouter(prefix="/api", tags=["api"])

_UNAVAILABLE = {"detail": "Service unavailable: agent not initialized."}


def _sse_event(event: str, data: str) -> str:
    return f"event: {event}\ndata: {data}\n\n"


def _get_agent(request: Request) -> Any:
    return getattr(request.app.state, "agent", None)


def _get_memory(request: Request, conversation_id: str | None) -> ConversationMemory:
    sessions = getattr(request.app.state, "sessions", None)
    if sessions is None:
        request.app.state.sessions = {}
        sessions = request.app.state.sessions
    key = conversation_id or "default"
    memory = sessions.get(key)
    if memory is None:
        memory = ConversationMemory()
        sessions[key] = memory
    return memory


def _build_query(body: ChatRequest, memory: ConversationMemory) -> Query:
    return Query(text=body.query, image_url=body.image_url, history=tuple(memory.get_history()))


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    """Health check."""
    return HealthResponse(
        status="ok" if _get_agent(request) is not None else "degraded",
        records_loaded=getattr(request.app.state, "records_loaded", 0),
    )


async def _stream_chat(agent: Any, query: Query, memory: ConversationMemory):
    q: queue.Queue = queue.Queue()

    def run_stream():
        try:
            for event in agent.stream(query):
                q.put(event)
        finally:
            q.put(None)

    thread = threading.Thread(target=run_stream, daemon=True)
    thread.start()
    loop = asyncio.get_running_loop()
    tokens: list[str] = []
    while True:
        event = await loop.run_in_executor(None, q.get)
        if event is None:
            break
        if event.type is EventType.TOKEN:
            tokens.append(event.data)
        elif event.type is EventType.DONE:
            memory.add_turn(query.text, "".join(tokens))
        yield _sse_event(event.type.value, json.dumps(event.to_dict()["data"]))


@router.post("/chat", response_model=ChatResponse)
async def chat(request: Request, body: ChatRequest) -> ChatResponse | JSONResponse:
    """Answer a query and return the full answer with structured data."""
    agent = _get_agent(request)
    if agent is None:
        return JSONResponse(status_code=503, content=_UNAVAILABLE)
    memory = _get_memory(request, body.conversation_id)
    query = _build_query(body, memory)
    try:
        resp = await asyncio.to_thread(agent.answer, query)
    except DelegatorError as e:
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to process query", "message": str(e)},
        )
    route = [r.value for r in resp.decision.labels] if resp.decision else []
    memory.add_turn(body.query, resp.answer)
    return ChatResponse(
        answer=resp.answer,
        route=route,
        data=[r.to_dict() for r in resp.references],
    )


@router.post("/chat/stream", response_model=None)
async def chat_stream(request: Request, body: ChatRequest) -> StreamingResponse | JSONResponse:
    """Stream events via SSE; the last frame is done or error."""
    agent = _get_agent(request)
    if agent is None:
        return JSONResponse(status_code=503, content=_UNAVAILABLE)
    memory = _get_memory(request, body.conversation_id)
    query = _build_query(body, memory)
    return StreamingResponse(
        _stream_chat(agent, query, memory),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@router.delete("/conversation")
async def clear_conversation(request: Request, conversation_id: str = "default") -> dict:
    """Clear conversation history for the given conversation_id."""
    sessions = getattr(request.app.state, "sessions", None) or {}
    if conversation_id in sessions:
        sessions[conversation_id].clear()
    return {"ok": True, "conversation_id": conversation_id}
