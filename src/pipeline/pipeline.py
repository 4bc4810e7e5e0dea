"""
Query pipeline: embed, retrieve, prompt, generate, canonicalize citations.

Owns the only cached state: the corpus of the selected event and the
embedding model handle. Callers are expected to serialize calls to answer().
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from src.errors import CorpusUnavailable, GenerationError, RetrievalError, ValidationError
from src.events.corpus import EmbeddingCorpus, load_corpus
from src.generation import AnswerGenerator, QueryResult, build_prompt, canonicalize
from src.rag.config import RAGConfig
from src.rag.embeddings import Embedder, SentenceTransformerEmbedder
from src.rag.retriever import RetrievedDocument, retrieve

logger = logging.getLogger(__name__)

CorpusLoader = Callable[[str], EmbeddingCorpus]

NO_SOURCES_ANSWER = "No source documents are available for this event."


class QueryPipeline:
    """Answer questions about one selected event at a time."""

    def __init__(
        self,
        generator: AnswerGenerator,
        corpus_loader: Optional[CorpusLoader] = None,
        embedder: Optional[Embedder] = None,
        embedder_factory: Optional[Callable[[], Embedder]] = None,
        config: Optional[RAGConfig] = None,
    ):
        self.generator = generator
        self.corpus_loader = corpus_loader or load_corpus
        self.config = config or RAGConfig()
        self._embedder = embedder
        self._embedder_factory = embedder_factory or (
            lambda: SentenceTransformerEmbedder(self.config.embedding_model)
        )
        self._corpus: Optional[EmbeddingCorpus] = None

    @property
    def cached_event_id(self) -> Optional[str]:
        return self._corpus.event_id if self._corpus is not None else None

    @property
    def embedder(self) -> Embedder:
        """Embedding model handle, created on first use and then reused."""
        if self._embedder is None:
            self._embedder = self._embedder_factory()
        return self._embedder

    def select_event(self, event_id: str) -> None:
        """Drop the cached corpus if it belongs to a different event."""
        if self._corpus is not None and self._corpus.event_id != event_id:
            logger.info(
                "Event changed from %s to %s; dropping cached corpus",
                self._corpus.event_id,
                event_id,
            )
            self._corpus = None

    def reload(self) -> None:
        """Drop the cached corpus unconditionally."""
        self._corpus = None

    def corpus_for(self, event_id: str) -> EmbeddingCorpus:
        """Return the corpus for event_id, loading it if the cache holds another event."""
        self.select_event(event_id)
        if self._corpus is not None:
            return self._corpus
        try:
            corpus = self.corpus_loader(event_id)
        except (RetrievalError, ValidationError):
            raise
        except Exception as e:
            raise RetrievalError(f"Failed to load corpus for event {event_id!r}: {e}") from e
        if corpus.event_id != event_id:
            raise CorpusUnavailable(
                f"Loader returned corpus for {corpus.event_id!r} instead of {event_id!r}."
            )
        self._corpus = corpus
        return corpus

    @staticmethod
    def _validate(query: str, event_id: str) -> None:
        if not query or not query.strip():
            raise ValidationError("Please enter a question.")
        if not event_id or not str(event_id).strip():
            raise ValidationError("Please select an event first.")

    def search(
        self,
        query: str,
        event_id: str,
        top_k: Optional[int] = None,
    ) -> List[RetrievedDocument]:
        """Retrieve the top documents for a query without generating an answer."""
        self._validate(query, event_id)
        corpus = self.corpus_for(event_id)
        if len(corpus) == 0:
            return []
        try:
            query_embedding = self.embedder.embed(query.strip())
        except Exception as e:
            raise RetrievalError(f"Failed to embed query: {e}") from e
        try:
            return retrieve(query_embedding, corpus, top_k or self.config.top_k)
        except ValueError as e:
            raise RetrievalError(f"Retrieval failed for event {event_id!r}: {e}") from e

    def answer(self, query: str, event_id: str) -> QueryResult:
        """
        Answer a question about an event.

        Returns:
            QueryResult whose [k] markers index citations[k-1].

        Raises:
            ValidationError: empty query or no event.
            RetrievalError: corpus could not be loaded (CorpusUnavailable if it does not exist).
            GenerationError: the LLM call failed.
        """
        self._validate(query, event_id)
        docs = self.search(query, event_id)
        if not docs:
            return QueryResult(answer_text=NO_SOURCES_ANSWER, citations=[], raw_answer_text="")

        prompt = build_prompt(query, docs)
        try:
            raw = self.generator.generate(prompt)
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(f"Answer generation failed: {e}") from e

        result = canonicalize(raw, docs)
        logger.info(
            "Answered query for event %s with %s citations from %s sources",
            event_id,
            len(result.citations),
            len(docs),
        )
        return result
