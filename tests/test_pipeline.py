"""
Tests for the query pipeline: validation, corpus caching, error propagation, end to end.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import numpy as np
import pytest

from src.errors import CorpusUnavailable, GenerationError, RetrievalError, ValidationError
from src.events import DocumentRecord, EmbeddingCorpus
from src.generation import AnswerGenerator, QueryResult
from src.pipeline import NO_SOURCES_ANSWER, QueryPipeline
from src.rag import RAGConfig


def _corpus(event_id: str) -> EmbeddingCorpus:
    documents = tuple(
        DocumentRecord(content=f"{event_id} article {i}", metadata={"title": f"T{i}"})
        for i in range(5)
    )
    embeddings = np.array(
        [
            [0.0, 1.0, 0.0],
            [0.1, 0.0, 1.0],
            [1.0, 0.1, 0.0],
            [0.0, 0.0, 1.0],
            [0.9, 0.0, 0.1],
        ]
    )
    return EmbeddingCorpus(event_id=event_id, documents=documents, embeddings=embeddings)


@pytest.fixture
def loader() -> MagicMock:
    return MagicMock(side_effect=_corpus)


@pytest.fixture
def embedder() -> MagicMock:
    emb = MagicMock()
    emb.embed.return_value = np.array([1.0, 0.0, 0.0])
    return emb


@pytest.fixture
def generator() -> MagicMock:
    gen = MagicMock(spec=AnswerGenerator)
    gen.generate.return_value = "Flooding displaced residents [2][2][1]."
    return gen


@pytest.fixture
def pipeline(loader: MagicMock, embedder: MagicMock, generator: MagicMock) -> QueryPipeline:
    return QueryPipeline(
        generator=generator,
        corpus_loader=loader,
        embedder=embedder,
        config=RAGConfig(top_k=3, embedding_model="test-model"),
    )


def test_answer_end_to_end(pipeline: QueryPipeline, generator: MagicMock):
    """Retrieves docs 2 and 4 first, then renumbers [2][2][1] to [1][1][2]."""
    result = pipeline.answer("Were people displaced?", "flood-2024")
    assert isinstance(result, QueryResult)
    assert result.answer_text == "Flooding displaced residents [1][1][2]."
    assert result.raw_answer_text == "Flooding displaced residents [2][2][1]."
    # position 1 -> corpus index 2, position 2 -> corpus index 4
    assert [c.content for c in result.citations] == [
        "flood-2024 article 4",
        "flood-2024 article 2",
    ]
    assert [c.source_id for c in result.citations] == [1, 2]
    prompt = generator.generate.call_args[0][0]
    assert "Source 1:\nTitle: T2\nContent: flood-2024 article 2" in prompt
    assert "Source 3:" in prompt
    assert "Source 4:" not in prompt


@pytest.mark.parametrize(
    "query, event_id",
    [("", "flood-2024"), ("   ", "flood-2024"), ("What happened?", ""), ("What happened?", None)],
)
def test_answer_validation_before_collaborators(
    pipeline: QueryPipeline,
    loader: MagicMock,
    embedder: MagicMock,
    generator: MagicMock,
    query,
    event_id,
):
    with pytest.raises(ValidationError):
        pipeline.answer(query, event_id)
    loader.assert_not_called()
    embedder.embed.assert_not_called()
    generator.generate.assert_not_called()


def test_corpus_cached_for_same_event(pipeline: QueryPipeline, loader: MagicMock):
    pipeline.answer("q1", "flood-2024")
    pipeline.answer("q2", "flood-2024")
    assert loader.call_count == 1
    assert pipeline.cached_event_id == "flood-2024"


def test_event_change_invalidates_corpus(pipeline: QueryPipeline, loader: MagicMock):
    pipeline.answer("q", "flood-2024")
    result = pipeline.answer("q", "quake-2023")
    assert loader.call_count == 2
    assert pipeline.cached_event_id == "quake-2023"
    assert all(c.content.startswith("quake-2023") for c in result.citations)


def test_select_event_drops_stale_corpus(pipeline: QueryPipeline):
    pipeline.answer("q", "flood-2024")
    pipeline.select_event("flood-2024")
    assert pipeline.cached_event_id == "flood-2024"
    pipeline.select_event("quake-2023")
    assert pipeline.cached_event_id is None


def test_reload_drops_corpus(pipeline: QueryPipeline, loader: MagicMock):
    pipeline.answer("q", "flood-2024")
    pipeline.reload()
    assert pipeline.cached_event_id is None
    pipeline.answer("q", "flood-2024")
    assert loader.call_count == 2


def test_embedder_created_once(loader: MagicMock, generator: MagicMock, embedder: MagicMock):
    factory = MagicMock(return_value=embedder)
    pipeline = QueryPipeline(generator=generator, corpus_loader=loader, embedder_factory=factory)
    pipeline.answer("q1", "flood-2024")
    pipeline.answer("q2", "quake-2023")
    factory.assert_called_once()
    assert embedder.embed.call_count == 2


def test_corpus_unavailable_propagates(generator: MagicMock, embedder: MagicMock):
    loader = MagicMock(side_effect=CorpusUnavailable("No embeddings available"))
    pipeline = QueryPipeline(generator=generator, corpus_loader=loader, embedder=embedder)
    with pytest.raises(CorpusUnavailable):
        pipeline.answer("q", "unknown")
    generator.generate.assert_not_called()


def test_loader_failure_wrapped(generator: MagicMock, embedder: MagicMock):
    loader = MagicMock(side_effect=OSError("disk gone"))
    pipeline = QueryPipeline(generator=generator, corpus_loader=loader, embedder=embedder)
    with pytest.raises(RetrievalError, match="disk gone"):
        pipeline.answer("q", "flood-2024")
    assert pipeline.cached_event_id is None


def test_generation_error_propagates(pipeline: QueryPipeline, generator: MagicMock):
    generator.generate.side_effect = GenerationError("provider returned 500")
    with pytest.raises(GenerationError, match="500"):
        pipeline.answer("q", "flood-2024")


def test_unexpected_generator_failure_wrapped(pipeline: QueryPipeline, generator: MagicMock):
    generator.generate.side_effect = TimeoutError("timed out")
    with pytest.raises(GenerationError):
        pipeline.answer("q", "flood-2024")


def test_empty_corpus_short_circuits(generator: MagicMock, embedder: MagicMock):
    empty = EmbeddingCorpus(event_id="empty", documents=(), embeddings=np.zeros((0, 3)))
    pipeline = QueryPipeline(
        generator=generator, corpus_loader=MagicMock(return_value=empty), embedder=embedder
    )
    result = pipeline.answer("q", "empty")
    assert result.answer_text == NO_SOURCES_ANSWER
    assert result.citations == []
    generator.generate.assert_not_called()


def test_out_of_range_citations_dropped(pipeline: QueryPipeline, generator: MagicMock):
    generator.generate.return_value = "Rivers rose [99][3]."
    result = pipeline.answer("q", "flood-2024")
    assert result.answer_text == "Rivers rose [1]."
    assert len(result.citations) == 1


def test_search_returns_ranked_documents(pipeline: QueryPipeline, generator: MagicMock):
    docs = pipeline.search("q", "flood-2024", top_k=2)
    assert [d.position_id for d in docs] == [1, 2]
    assert docs[0].content == "flood-2024 article 2"
    generator.generate.assert_not_called()


def test_dimension_mismatch_is_retrieval_error(pipeline: QueryPipeline, embedder: MagicMock):
    embedder.embed.return_value = np.array([1.0, 0.0])
    with pytest.raises(RetrievalError):
        pipeline.answer("q", "flood-2024")
