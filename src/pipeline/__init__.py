"""
Pipeline: per-event corpus cache and the question answering flow.
"""

from .pipeline import NO_SOURCES_ANSWER, QueryPipeline

__all__ = ["NO_SOURCES_ANSWER", "QueryPipeline"]
