"""
FastAPI application for the delegating agent.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from delegator.errors import MissingCredentialsError

from .deps import build_agent
from .routes import router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build agent on startup; clear sessions on shutdown."""
    try:
        agent, records_loaded = build_agent()
    except MissingCredentialsError as e:
        logger.error("Agent not initialized (%s); chat endpoints will return 503", e)
        agent, records_loaded = None, 0
    app.state.agent = agent
    app.state.records_loaded = records_loaded
    app.state.sessions = {}
    yield
    app.state.sessions.clear()


app = FastAPI(
    title="Delegator API",
    description="Routes questions to retrieval, charts, images or direct answers",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
app.include_router(router)
