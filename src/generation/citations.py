"""
Extract [1], [2], ... references from generated text and map them to retrieved documents.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from src.rag.retriever import RetrievedDocument

logger = logging.getLogger(__name__)

# Marker wire format shared with the UI: "[" + ASCII digits + "]".
CITATION_RE = re.compile(r"\[([0-9]+)\]")
MAX_MARKER_DIGITS = 9


@dataclass
class Citation:
    """A source referenced by the answer. source_id is the number used in the text."""

    source_id: int
    content: str
    metadata: Dict[str, Any] = field(default_factory=dict)


def marker_number(digits: str) -> Optional[int]:
    """Parse a marker's digits; None for numbers too long to ever name a source."""
    if len(digits) > MAX_MARKER_DIGITS:
        return None
    try:
        return int(digits)
    except ValueError:
        return None


def iter_marker_numbers(text: str) -> Iterable[int]:
    """Yield every parseable marker number in order of appearance, duplicates included."""
    for m in CITATION_RE.finditer(text or ""):
        n = marker_number(m.group(1))
        if n is None:
            logger.debug("Skipping unparseable citation marker of %s digits", len(m.group(1)))
            continue
        yield n


def extract_citations(
    answer: str,
    docs: List[RetrievedDocument],
) -> Dict[int, Citation]:
    """
    Parse [n] references in answer and map them to docs by position.
    docs[0] -> [1], docs[1] -> [2], etc.

    Numbers outside 1..len(docs) are dropped.

    Returns:
        One Citation per distinct referenced number, keyed by that number in ascending order.
    """
    if not docs:
        return {}
    indices = set()
    for n in iter_marker_numbers(answer):
        if 1 <= n <= len(docs):
            indices.add(n)
        else:
            logger.debug("Dropping out-of-range citation [%s] (%s sources)", n, len(docs))
    citations: Dict[int, Citation] = {}
    for n in sorted(indices):
        doc = docs[n - 1]
        citations[n] = Citation(source_id=n, content=doc.content, metadata=dict(doc.metadata))
    return citations


def find_citation(citations: List[Citation], source_id: int) -> Optional[Citation]:
    """Look up the citation a marker points at, or None if the marker is unresolved."""
    for c in citations:
        if c.source_id == source_id:
            return c
    return None
