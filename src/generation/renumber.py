"""
Canonical citation numbering.

The model may cite sources out of order, repeat them, or cite a subset. The
canonical form numbers sources 1..N in order of first appearance in the answer
and keeps only sources the answer actually references.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional

from src.rag.retriever import RetrievedDocument

from .citations import (
    CITATION_RE,
    Citation,
    extract_citations,
    iter_marker_numbers,
    marker_number,
)

# Marker plus any spaces before it, so "claim [99]." becomes "claim."
_MARKER_WITH_LEADING_SPACE_RE = re.compile(r"([ \t]*)\[([0-9]+)\]")


@dataclass
class QueryResult:
    """Final answer with canonical markers; citations[k-1] is the source for [k]."""

    answer_text: str
    citations: List[Citation] = field(default_factory=list)
    raw_answer_text: str = ""


def build_renumber_map(answer: str) -> Dict[int, int]:
    """Map each distinct marker number to its 1-based rank of first appearance."""
    old_to_new: Dict[int, int] = {}
    for old in iter_marker_numbers(answer):
        if old not in old_to_new:
            old_to_new[old] = len(old_to_new) + 1
    return old_to_new


def _strip_markers(answer: str, keep: Callable[[Optional[int]], bool]) -> str:
    """Remove markers for which keep() is false, with the spaces before them."""

    def _sub(m: re.Match) -> str:
        if keep(marker_number(m.group(2))):
            return m.group(0)
        # Keep the space when another marker follows directly: "rose [99][3]" -> "rose [3]"
        followed_by_marker = m.string[m.end() : m.end() + 1] == "["
        return m.group(1) if followed_by_marker else ""

    text = _MARKER_WITH_LEADING_SPACE_RE.sub(_sub, answer or "")
    # A stripped marker at the very start leaves the following space behind.
    if answer and not answer[0].isspace():
        text = text.lstrip(" \t")
    return text


def rewrite_and_reorder(
    answer: str,
    old_to_new: Mapping[int, int],
    citations_by_source_id: Mapping[int, Citation],
    raw_answer: Optional[str] = None,
) -> QueryResult:
    """
    Rewrite markers with their new numbers and order citations to match.

    Markers whose number is not in old_to_new are left as is. Mapped numbers
    without an extracted citation are removed from the text and the remaining
    ones are renumbered densely, so citations[k-1] always belongs to [k].
    """
    resolved = [
        old
        for old, _ in sorted(old_to_new.items(), key=lambda item: item[1])
        if old in citations_by_source_id
    ]
    dense = {old: new for new, old in enumerate(resolved, 1)}
    text = _strip_markers(answer, lambda n: n is None or n in dense or n not in old_to_new)

    def _sub(m: re.Match) -> str:
        new = dense.get(marker_number(m.group(1)))
        return m.group(0) if new is None else f"[{new}]"

    text = CITATION_RE.sub(_sub, text)

    citations = []
    for old in resolved:
        cit = citations_by_source_id[old]
        citations.append(
            Citation(source_id=dense[old], content=cit.content, metadata=dict(cit.metadata))
        )

    return QueryResult(
        answer_text=text,
        citations=citations,
        raw_answer_text=answer if raw_answer is None else raw_answer,
    )


def strip_unresolved_markers(answer: str, valid_ids: Mapping[int, object]) -> str:
    """Remove markers whose number is not a key of valid_ids, including unparseable ones."""
    return _strip_markers(answer, lambda n: n is not None and n in valid_ids)


def canonicalize(answer: str, docs: List[RetrievedDocument]) -> QueryResult:
    """
    Extract citations from a raw answer and renumber them canonically.

    Out-of-range markers are removed from the text first so every remaining
    marker resolves to a citation and every citation is referenced.
    """
    extracted = extract_citations(answer, docs)
    cleaned = strip_unresolved_markers(answer, extracted)
    old_to_new = build_renumber_map(cleaned)
    return rewrite_and_reorder(cleaned, old_to_new, extracted, raw_answer=answer)
