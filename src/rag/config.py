"""
Configuration for retrieval.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field


@dataclass
class RAGConfig:
    """Configuration for RAG retrieval."""

    top_k: int = 5
    embedding_model: str = field(
        default_factory=lambda: os.getenv("EMBEDDING_MODEL", "all-MiniLM-L6-v2")
    )
