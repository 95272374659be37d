"""
Request and response models for the HTTP API.
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Request body for POST /api/chat and /api/chat/stream."""

    query: str = Field(..., min_length=1, description="User question")
    image_url: Optional[str] = Field(None, description="Source image to edit")
    conversation_id: Optional[str] = Field(None, description="Session ID for conversation history")


class ChatResponse(BaseModel):
    """Response for POST /api/chat."""

    answer: str
    route: List[str] = Field(default_factory=list)
    data: List[dict[str, Any]] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    status: str = "ok"
    records_loaded: int = 0
