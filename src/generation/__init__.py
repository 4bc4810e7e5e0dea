"""
Answer generation module.

- Prompt building from retrieved documents ("Source 1", "Source 2", ...)
- Answer generation via the LLM
- Citation extraction and canonical renumbering
"""

from .citations import CITATION_RE, Citation, extract_citations, find_citation
from .config import GenerationConfig
from .generator import AnswerGenerator
from .prompt_builder import build_prompt
from .prompts import ANSWER_INSTRUCTIONS, ANSWER_PROMPT
from .renumber import (
    QueryResult,
    build_renumber_map,
    canonicalize,
    rewrite_and_reorder,
    strip_unresolved_markers,
)

__all__ = [
    "ANSWER_INSTRUCTIONS",
    "ANSWER_PROMPT",
    "AnswerGenerator",
    "build_prompt",
    "build_renumber_map",
    "canonicalize",
    "Citation",
    "CITATION_RE",
    "extract_citations",
    "find_citation",
    "GenerationConfig",
    "QueryResult",
    "rewrite_and_reorder",
    "strip_unresolved_markers",
]
