"""
Build the query pipeline for the API (used in lifespan).
"""

from __future__ import annotations

import logging
from typing import Optional

from src.generation import AnswerGenerator, GenerationConfig
from src.llm import create_client
from src.pipeline import QueryPipeline
from src.rag import RAGConfig

logger = logging.getLogger(__name__)


def build_pipeline() -> Optional[QueryPipeline]:
    """
    Create LLM client, generator and pipeline.
    Returns None when the LLM is not configured so routes can return 503.
    The embedding model is loaded lazily on the first question.
    """
    try:
        client = create_client()
    except ValueError as e:
        logger.warning("Query pipeline disabled: %s", e)
        return None
    generator = AnswerGenerator(client, GenerationConfig())
    return QueryPipeline(generator=generator, config=RAGConfig())
