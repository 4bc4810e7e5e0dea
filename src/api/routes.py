"""
API routes: ask, search, event selection, event graph, health.
"""

from __future__ import annotations

import asyncio
import dataclasses
from typing import Any, Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from src.errors import CorpusUnavailable, GenerationError, KGQAError, RetrievalError, ValidationError
from src.events import load_event_graph

from .models import (
    AskRequest,
    AskResponse,
    CitationOut,
    EventGraphResponse,
    HealthResponse,
    SearchHit,
    SearchRequest,
    SearchResponse,
    SelectEventResponse,
)

router = APIRouter(prefix="/api", tags=["api"])


def _get_pipeline(request: Request) -> Any:
    return getattr(request.app.state, "pipeline", None)


def _get_lock(request: Request) -> asyncio.Lock:
    # Queries share the pipeline's corpus cache; run them one at a time.
    lock = getattr(request.app.state, "query_lock", None)
    if lock is None:
        lock = asyncio.Lock()
        request.app.state.query_lock = lock
    return lock


def _unavailable() -> JSONResponse:
    return JSONResponse(
        status_code=503,
        content={"detail": "Service unavailable: query pipeline not initialized."},
    )


def _error_response(error: KGQAError) -> JSONResponse:
    if isinstance(error, ValidationError):
        status = 400
    elif isinstance(error, CorpusUnavailable):
        status = 404
    elif isinstance(error, RetrievalError):
        status = 503
    elif isinstance(error, GenerationError):
        status = 502
    else:
        status = 500
    return JSONResponse(status_code=status, content={"detail": str(error)})


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    """Health check."""
    pipeline = _get_pipeline(request)
    return HealthResponse(
        status="ok",
        pipeline_ready=pipeline is not None,
        cached_event_id=pipeline.cached_event_id if pipeline is not None else None,
    )


@router.post("/ask", response_model=AskResponse)
async def ask(request: Request, body: AskRequest) -> AskResponse | JSONResponse:
    """Answer a question about the selected event with canonical citations."""
    pipeline = _get_pipeline(request)
    if pipeline is None:
        return _unavailable()
    async with _get_lock(request):
        try:
            result = await asyncio.to_thread(pipeline.answer, body.query, body.event_id or "")
        except KGQAError as e:
            return _error_response(e)
    return AskResponse(
        answer=result.answer_text,
        citations=[
            CitationOut(source_id=c.source_id, content=c.content, metadata=c.metadata)
            for c in result.citations
        ],
        raw_answer=result.raw_answer_text,
    )


@router.post("/search", response_model=SearchResponse)
async def search_endpoint(request: Request, body: SearchRequest) -> SearchResponse | JSONResponse:
    """Direct search (no generation)."""
    pipeline = _get_pipeline(request)
    if pipeline is None:
        return _unavailable()
    async with _get_lock(request):
        try:
            docs = await asyncio.to_thread(pipeline.search, body.query, body.event_id, body.top_k)
        except KGQAError as e:
            return _error_response(e)
    hits = [
        SearchHit(
            position_id=d.position_id,
            title=str(d.metadata.get("title") or ""),
            url=str(d.metadata.get("url") or ""),
            content=d.content[:500] + "…" if len(d.content) > 500 else d.content,
            score=round(d.score, 4),
        )
        for d in docs
    ]
    return SearchResponse(query=body.query, event_id=body.event_id, results=hits)


@router.post("/events/{event_id}/select", response_model=SelectEventResponse)
async def select_event(request: Request, event_id: str) -> SelectEventResponse | JSONResponse:
    """Mark an event as selected; a cached corpus for another event is dropped."""
    pipeline = _get_pipeline(request)
    if pipeline is None:
        return _unavailable()
    async with _get_lock(request):
        before = pipeline.cached_event_id
        pipeline.select_event(event_id)
    return SelectEventResponse(
        event_id=event_id,
        cache_cleared=before is not None and pipeline.cached_event_id is None,
    )


@router.get("/events/{event_id}/graph", response_model=EventGraphResponse)
async def event_graph(request: Request, event_id: str) -> EventGraphResponse | JSONResponse:
    """Nodes, edges and stats of an event's knowledge graph."""
    data_dir: Optional[Any] = getattr(request.app.state, "data_dir", None)
    try:
        graph = await asyncio.to_thread(load_event_graph, event_id, data_dir)
    except KGQAError as e:
        if isinstance(e, RetrievalError):
            return JSONResponse(status_code=404, content={"detail": str(e)})
        return _error_response(e)
    return EventGraphResponse(
        event_id=event_id,
        info=dataclasses.asdict(graph.info),
        nodes=[dataclasses.asdict(n) for n in graph.nodes],
        edges=[dataclasses.asdict(e) for e in graph.edges],
        stats=dataclasses.asdict(graph.stats),
    )
