"""
FastAPI application for the event Q&A API.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .deps import build_pipeline
from .routes import router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the query pipeline on startup; drop its cache on shutdown."""
    app.state.pipeline = build_pipeline()
    app.state.query_lock = asyncio.Lock()
    yield
    if app.state.pipeline is not None:
        app.state.pipeline.reload()


app = FastAPI(
    title="Disaster KG Q&A API",
    description="Questions over disaster-event knowledge graphs with cited sources",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
app.include_router(router)
