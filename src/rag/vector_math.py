"""
Similarity scoring between embedding vectors.
"""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np

Vector = Union[Sequence[float], np.ndarray]


def cosine_similarity(a: Vector, b: Vector) -> float:
    """
    Cosine similarity of two equal-length, non-empty vectors.

    Returns nan when either vector is all zeros.
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.ndim != 1 or vb.ndim != 1:
        raise ValueError("cosine_similarity expects 1-d vectors")
    if va.size == 0 or vb.size == 0:
        raise ValueError("cosine_similarity expects non-empty vectors")
    if va.size != vb.size:
        raise ValueError(f"vector length mismatch: {va.size} != {vb.size}")
    denom = np.linalg.norm(va) * np.linalg.norm(vb)
    with np.errstate(invalid="ignore", divide="ignore"):
        return float(np.dot(va, vb) / denom)


def cosine_similarities(query: Vector, matrix: np.ndarray) -> np.ndarray:
    """Row-wise cosine similarity of every row of matrix against query."""
    q = np.asarray(query, dtype=np.float64)
    m = np.asarray(matrix, dtype=np.float64)
    if m.ndim != 2:
        raise ValueError("matrix must be 2-d (n_rows, dim)")
    if q.ndim != 1 or q.size == 0:
        raise ValueError("query must be a non-empty 1-d vector")
    if m.shape[0] == 0:
        return np.zeros(0, dtype=np.float64)
    if m.shape[1] != q.size:
        raise ValueError(f"dimension mismatch: query has {q.size}, corpus has {m.shape[1]}")
    denom = np.linalg.norm(m, axis=1) * np.linalg.norm(q)
    with np.errstate(invalid="ignore", divide="ignore"):
        return (m @ q) / denom
