"""
Prompt builder for event question answering.

Renders retrieved documents as numbered "Source n" blocks so the model cites
them with [n], where n is the document's position_id for this query.
"""

from __future__ import annotations

from typing import List

from src.rag.retriever import RetrievedDocument

from .prompts import ANSWER_PROMPT


def format_source(doc: RetrievedDocument) -> str:
    """Render one document block. Title and URL lines appear only when set."""
    lines = [f"Source {doc.position_id}:"]
    title = str(doc.metadata.get("title") or "").strip()
    if title:
        lines.append(f"Title: {title}")
    url = str(doc.metadata.get("url") or "").strip()
    if url:
        lines.append(f"URL: {url}")
    lines.append(f"Content: {(doc.content or '').strip()}")
    return "\n".join(lines)


def build_sources(docs: List[RetrievedDocument]) -> str:
    ordered = sorted(docs, key=lambda d: d.position_id)
    return "\n\n".join(format_source(d) for d in ordered)


def build_prompt(query: str, docs: List[RetrievedDocument]) -> str:
    """
    Build the generation prompt for a query and its retrieved documents.

    Args:
        query: User question.
        docs: Retrieved documents; rendered in position_id order.

    Returns:
        Prompt text: source blocks, the question, then fixed citation instructions.
    """
    return ANSWER_PROMPT.format(sources=build_sources(docs), query=query.strip())
