"""
Top-k semantic retrieval over a cached event corpus.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

import numpy as np

from src.events.corpus import EmbeddingCorpus

from .vector_math import Vector, cosine_similarities


@dataclass
class RetrievedDocument:
    """A corpus document selected for one query. position_id is the number the generator cites."""

    content: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    score: float = 0.0
    rank: int = 1
    position_id: int = 1


def retrieve(
    query_embedding: Vector,
    corpus: EmbeddingCorpus,
    top_k: int,
) -> List[RetrievedDocument]:
    """
    Rank every corpus document against the query embedding.

    Args:
        query_embedding: Vector with the same dimension as the corpus rows.
        corpus: Event corpus to search.
        top_k: Maximum number of documents to return.

    Returns:
        min(top_k, len(corpus)) documents sorted by descending similarity.
        Ties keep corpus order. position_id runs 1..len(result) and is only
        meaningful for this query.
    """
    if top_k < 1:
        raise ValueError("top_k must be >= 1")
    if len(corpus) == 0:
        return []
    sims = cosine_similarities(query_embedding, corpus.embeddings)
    order = np.argsort(-sims, kind="stable")[:top_k]
    results: List[RetrievedDocument] = []
    for i, idx in enumerate(order, 1):
        doc = corpus.documents[int(idx)]
        results.append(
            RetrievedDocument(
                content=doc.content,
                metadata=dict(doc.metadata),
                score=float(sims[idx]),
                rank=i,
                position_id=i,
            )
        )
    return results
