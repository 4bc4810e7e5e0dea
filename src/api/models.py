"""
Request and response models for the event Q&A API.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class AskRequest(BaseModel):
    """Request body for POST /api/ask."""

    query: str = Field(..., description="User question")
    event_id: Optional[str] = Field(None, description="Selected event (file stem)")


class CitationOut(BaseModel):
    """Canonical citation; source_id matches the [n] marker in the answer."""

    source_id: int
    content: str = ""
    metadata: Dict[str, Any] = Field(default_factory=dict)


class AskResponse(BaseModel):
    """Response for POST /api/ask."""

    answer: str
    citations: List[CitationOut] = Field(default_factory=list)
    raw_answer: str = ""


class SearchRequest(BaseModel):
    """Request body for POST /api/search."""

    query: str = Field(..., min_length=1)
    event_id: str = Field(..., min_length=1)
    top_k: int = Field(5, ge=1, le=20)


class SearchHit(BaseModel):
    """Single search result."""

    position_id: int
    title: str = ""
    url: str = ""
    content: str
    score: float


class SearchResponse(BaseModel):
    """Response for POST /api/search."""

    query: str
    event_id: str
    results: List[SearchHit] = Field(default_factory=list)


class SelectEventResponse(BaseModel):
    """Response for POST /api/events/{event_id}/select."""

    event_id: str
    cache_cleared: bool


class EventInfoOut(BaseModel):
    dis_no: str
    disaster_type: str
    country: str
    location: str
    start_dt: str


class NodeOut(BaseModel):
    id: str
    n_citations: int = 0
    question: str = ""
    answer: str = ""
    citations: List[Dict[str, Any]] = Field(default_factory=list)


class EdgeOut(BaseModel):
    id: int
    source: str
    target: str
    relation: str
    n_citations: int = 0
    question: str = ""
    answer: str = ""
    citations: List[Dict[str, Any]] = Field(default_factory=list)


class GraphStatsOut(BaseModel):
    nodes: int = 0
    edges: int = 0
    citations: int = 0
    articles: int = 0


class EventGraphResponse(BaseModel):
    """Response for GET /api/events/{event_id}/graph."""

    event_id: str
    info: EventInfoOut
    nodes: List[NodeOut] = Field(default_factory=list)
    edges: List[EdgeOut] = Field(default_factory=list)
    stats: GraphStatsOut


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    status: str = "ok"
    pipeline_ready: bool = False
    cached_event_id: Optional[str] = None
