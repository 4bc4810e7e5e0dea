"""
RAG (Retrieval-Augmented Generation) module.

Provides retrieval over a per-event embedding corpus:
- Cosine similarity scoring
- Top-k dense retrieval with stable ordering
- Query embedding with sentence-transformers
"""

from .config import RAGConfig
from .embeddings import EMBEDDING_MODEL, Embedder, SentenceTransformerEmbedder
from .retriever import RetrievedDocument, retrieve
from .vector_math import cosine_similarities, cosine_similarity

__all__ = [
    "cosine_similarity",
    "cosine_similarities",
    "Embedder",
    "EMBEDDING_MODEL",
    "RAGConfig",
    "RetrievedDocument",
    "retrieve",
    "SentenceTransformerEmbedder",
]
