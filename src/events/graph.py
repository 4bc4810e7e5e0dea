"""
Event knowledge graph: nodes and edges with their citation counts.

Each event file holds a list of (source, relation, target) triples, each with
a question, an answer carrying [n] markers, and the citations behind it.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from src.errors import RetrievalError

from .corpus import DATA_DIR, check_event_id

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class EventInfo:
    """Headline fields of a disaster event."""

    dis_no: str = "N/A"
    disaster_type: str = "N/A"
    country: str = "N/A"
    location: str = "N/A"
    start_dt: str = "N/A"

    @classmethod
    def from_data(cls, data: Dict[str, Any]) -> "EventInfo":
        return cls(
            dis_no=str(data.get("DisNo") or "N/A"),
            disaster_type=str(data.get("disaster_type") or "N/A"),
            country=str(data.get("country") or "N/A"),
            location=str(data.get("location") or "N/A"),
            start_dt=str(data.get("start_dt") or "N/A"),
        )


@dataclasses.dataclass
class GraphNode:
    id: str
    n_citations: int = 0
    question: str = ""
    answer: str = ""
    citations: List[Dict[str, Any]] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class GraphEdge:
    id: int
    source: str
    target: str
    relation: str
    n_citations: int = 0
    question: str = ""
    answer: str = ""
    citations: List[Dict[str, Any]] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class GraphStats:
    nodes: int = 0
    edges: int = 0
    citations: int = 0
    articles: int = 0


@dataclasses.dataclass
class EventGraph:
    info: EventInfo
    nodes: List[GraphNode]
    edges: List[GraphEdge]
    stats: GraphStats


def event_path(event_id: str, data_dir: Optional[Path] = None) -> Path:
    base = data_dir if data_dir is not None else DATA_DIR
    return base / f"{check_event_id(event_id)}.json"


def load_event_data(event_id: str, data_dir: Optional[Path] = None) -> Dict[str, Any]:
    """Read the raw event JSON. Raises RetrievalError if it is missing or unreadable."""
    path = event_path(event_id, data_dir)
    if not path.exists():
        raise RetrievalError(f"No knowledge graph available for event {event_id!r}.")
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Failed to read event %s: %s", event_id, e)
        raise RetrievalError(f"Event {event_id!r} could not be read: {e}") from e
    if not isinstance(data, dict):
        raise RetrievalError(f"Event {event_id!r} is malformed.")
    return data


def _int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def extract_graph(data: Dict[str, Any]) -> EventGraph:
    """Build nodes (first-appearance order) and one edge per triple."""
    triples = data.get("knowledge_graph_with_citations") or []
    node_details = {
        item.get("node"): item
        for item in (data.get("nodes_with_citations") or [])
        if isinstance(item, dict) and item.get("node")
    }

    node_ids: Dict[str, None] = {}
    edges: List[GraphEdge] = []
    for idx, item in enumerate(triples):
        source = str(item.get("source", ""))
        target = str(item.get("target", ""))
        node_ids.setdefault(source)
        node_ids.setdefault(target)
        edges.append(
            GraphEdge(
                id=idx,
                source=source,
                target=target,
                relation=str(item.get("relation", "")),
                n_citations=_int(item.get("n_citations")),
                question=str(item.get("question") or ""),
                answer=str(item.get("answer") or ""),
                citations=list(item.get("citations") or []),
            )
        )

    nodes: List[GraphNode] = []
    for node_id in node_ids:
        detail = node_details.get(node_id) or {}
        nodes.append(
            GraphNode(
                id=node_id,
                n_citations=_int(detail.get("n_citations")),
                question=str(detail.get("question") or ""),
                answer=str(detail.get("answer") or ""),
                citations=list(detail.get("citations") or []),
            )
        )

    stats = GraphStats(
        nodes=len(nodes),
        edges=len(edges),
        citations=_int(data.get("total_citations")) + _int(data.get("total_node_citations")),
        articles=_int(data.get("n_articles")),
    )
    return EventGraph(info=EventInfo.from_data(data), nodes=nodes, edges=edges, stats=stats)


def load_event_graph(event_id: str, data_dir: Optional[Path] = None) -> EventGraph:
    return extract_graph(load_event_data(event_id, data_dir))
