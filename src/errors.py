"""
Error taxonomy for the event Q&A pipeline.

Out-of-range citation markers are not errors; they are filtered during
citation extraction and never surface to callers.
"""

from __future__ import annotations


class KGQAError(Exception):
    """Base class for every error raised to callers of the pipeline."""


class ValidationError(KGQAError):
    """Missing query or event. The caller must correct the input."""


class RetrievalError(KGQAError):
    """The corpus for an event could not be loaded or searched."""


class CorpusUnavailable(RetrievalError):
    """No precomputed embeddings exist for the event."""


class GenerationError(KGQAError):
    """The text-generation call failed. Safe to retry."""
