"""
Query embedding with sentence-transformers.
"""

from __future__ import annotations

import logging
import os
from typing import Optional, Protocol

import numpy as np
from sentence_transformers import SentenceTransformer

logger = logging.getLogger(__name__)

EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "all-MiniLM-L6-v2")


class Embedder(Protocol):
    """Anything that turns text into a fixed-length vector."""

    def embed(self, text: str) -> np.ndarray:
        ...


class SentenceTransformerEmbedder:
    """Embedder backed by a SentenceTransformer model. Must match the model used for the corpus."""

    def __init__(self, model_name: Optional[str] = None):
        self.model_name = model_name or EMBEDDING_MODEL
        logger.info("Loading embedding model %s", self.model_name)
        self.model = SentenceTransformer(self.model_name)

    def embed(self, text: str) -> np.ndarray:
        return self.model.encode(
            [text],
            convert_to_numpy=True,
            normalize_embeddings=True,
        )[0]
