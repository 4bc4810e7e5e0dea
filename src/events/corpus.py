"""
Loading of precomputed per-event document embeddings.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import numpy as np
from dotenv import load_dotenv

from src.errors import CorpusUnavailable, ValidationError

ROOT = Path(__file__).resolve().parents[2]

env_file = ROOT / ".env"
if env_file.exists():
    load_dotenv(env_file)

DATA_DIR = Path(os.getenv("DATA_DIR", str(ROOT / "data")))
EMBEDDINGS_SUBDIR = "embeddings"

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class DocumentRecord:
    """A source article attached to an event. Identified only by its position."""

    content: str
    metadata: Dict[str, Any] = dataclasses.field(default_factory=dict)

    @property
    def title(self) -> str:
        return str(self.metadata.get("title") or "")

    @property
    def url(self) -> str:
        return str(self.metadata.get("url") or "")


@dataclasses.dataclass(frozen=True)
class EmbeddingCorpus:
    """Documents of one event and their embeddings; documents[i] pairs with embeddings[i]."""

    event_id: str
    documents: Tuple[DocumentRecord, ...]
    embeddings: np.ndarray  # shape: (n_documents, dim)

    def __post_init__(self) -> None:
        if len(self.documents) != len(self.embeddings):
            raise ValueError(
                f"corpus for {self.event_id!r} has {len(self.documents)} documents "
                f"but {len(self.embeddings)} embeddings"
            )

    def __len__(self) -> int:
        return len(self.documents)


def check_event_id(event_id: str) -> str:
    """Event IDs are file stems; reject anything that could escape the data directory."""
    if not event_id or not str(event_id).strip():
        raise ValidationError("No event selected.")
    event_id = str(event_id).strip()
    if "/" in event_id or "\\" in event_id or event_id in (".", ".."):
        raise ValidationError(f"Invalid event id: {event_id!r}")
    return event_id


def corpus_path(event_id: str, data_dir: Path | None = None) -> Path:
    base = data_dir if data_dir is not None else DATA_DIR
    return base / EMBEDDINGS_SUBDIR / f"{check_event_id(event_id)}.json"


def load_corpus(event_id: str, data_dir: Optional[Path] = None) -> EmbeddingCorpus:
    """
    Load the embedding corpus for an event.

    Expects <data_dir>/embeddings/<event_id>.json shaped like
    {"documents": [{"content": ..., "metadata": {...}}], "embeddings": [[...], ...]}.

    Raises:
        CorpusUnavailable: file missing, unreadable, or malformed.
    """
    path = corpus_path(event_id, data_dir)
    if not path.exists():
        raise CorpusUnavailable(f"No embeddings available for event {event_id!r}.")
    try:
        with path.open("r", encoding="utf-8") as f:
            obj = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Failed to read embeddings for %s: %s", event_id, e)
        raise CorpusUnavailable(f"Embeddings for event {event_id!r} could not be read: {e}") from e

    raw_docs = obj.get("documents") if isinstance(obj, dict) else None
    raw_emb = obj.get("embeddings") if isinstance(obj, dict) else None
    if not isinstance(raw_docs, list) or not isinstance(raw_emb, list):
        raise CorpusUnavailable(f"Embeddings file for event {event_id!r} is malformed.")
    if not all(isinstance(d, dict) for d in raw_docs):
        raise CorpusUnavailable(f"Documents for event {event_id!r} must be JSON objects.")

    documents = tuple(
        DocumentRecord(
            content=str(d.get("content") or ""),
            metadata=dict(d.get("metadata") or {}),
        )
        for d in raw_docs
    )
    try:
        embeddings = np.asarray(raw_emb, dtype=np.float32)
    except (TypeError, ValueError) as e:
        raise CorpusUnavailable(f"Embeddings for event {event_id!r} are not numeric: {e}") from e
    if embeddings.ndim == 1 and embeddings.size == 0:
        embeddings = embeddings.reshape(0, 0)
    if embeddings.ndim != 2:
        raise CorpusUnavailable(f"Embeddings for event {event_id!r} must be a 2-d array.")

    try:
        corpus = EmbeddingCorpus(event_id=str(event_id), documents=documents, embeddings=embeddings)
    except ValueError as e:
        raise CorpusUnavailable(str(e)) from e
    logger.info("Loaded %s documents for event %s", len(corpus), event_id)
    return corpus
