"""
Event data: precomputed document embeddings and the event knowledge graph.
"""

from .corpus import DATA_DIR, DocumentRecord, EmbeddingCorpus, check_event_id, load_corpus
from .graph import (
    EventGraph,
    EventInfo,
    GraphEdge,
    GraphNode,
    GraphStats,
    extract_graph,
    load_event_data,
    load_event_graph,
)

__all__ = [
    "check_event_id",
    "DATA_DIR",
    "DocumentRecord",
    "EmbeddingCorpus",
    "EventGraph",
    "EventInfo",
    "extract_graph",
    "GraphEdge",
    "GraphNode",
    "GraphStats",
    "load_corpus",
    "load_event_data",
    "load_event_graph",
]
