"""
Tests for the FastAPI routes.
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock

import numpy as np
import pytest
from fastapi.testclient import TestClient

from src.api.main import app
from src.errors import CorpusUnavailable, GenerationError
from src.events import DocumentRecord, EmbeddingCorpus
from src.generation import AnswerGenerator
from src.pipeline import QueryPipeline
from src.rag import RAGConfig

client = TestClient(app)


def _corpus(event_id: str) -> EmbeddingCorpus:
    if event_id == "missing":
        raise CorpusUnavailable(f"No embeddings available for event {event_id!r}.")
    documents = (
        DocumentRecord(content="Rain fell for days.", metadata={"title": "Rain", "url": "https://a"}),
        DocumentRecord(content="Rivers rose above levees.", metadata={"title": "Rivers"}),
        DocumentRecord(content="Thousands were displaced.", metadata={}),
    )
    embeddings = np.array([[1.0, 0.0], [0.8, 0.2], [0.0, 1.0]])
    return EmbeddingCorpus(event_id=event_id, documents=documents, embeddings=embeddings)


@pytest.fixture
def generator() -> MagicMock:
    gen = MagicMock(spec=AnswerGenerator)
    gen.generate.return_value = "Rivers rose [2] after rain [1][2]."
    return gen


@pytest.fixture(autouse=True)
def pipeline_state(generator: MagicMock, tmp_path: Path):
    embedder = MagicMock()
    embedder.embed.return_value = np.array([1.0, 0.0])
    app.state.pipeline = QueryPipeline(
        generator=generator,
        corpus_loader=MagicMock(side_effect=_corpus),
        embedder=embedder,
        config=RAGConfig(top_k=2, embedding_model="test-model"),
    )
    app.state.data_dir = tmp_path
    yield
    app.state.pipeline = None
    app.state.data_dir = None


def test_health():
    r = client.get("/api/health")
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert data["pipeline_ready"] is True
    assert data["cached_event_id"] is None


def test_ask_returns_canonical_citations():
    r = client.post("/api/ask", json={"query": "What happened?", "event_id": "flood"})
    assert r.status_code == 200
    data = r.json()
    assert data["answer"] == "Rivers rose [1] after rain [2][1]."
    assert data["raw_answer"] == "Rivers rose [2] after rain [1][2]."
    assert [c["source_id"] for c in data["citations"]] == [1, 2]
    assert data["citations"][0]["content"] == "Rivers rose above levees."
    assert data["citations"][1]["metadata"] == {"title": "Rain", "url": "https://a"}


def test_ask_requires_body():
    r = client.post("/api/ask", json={})
    assert r.status_code == 422


@pytest.mark.parametrize("body", [{"query": "", "event_id": "flood"}, {"query": "What happened?"}])
def test_ask_validation_error(body: dict, generator: MagicMock):
    r = client.post("/api/ask", json=body)
    assert r.status_code == 400
    assert "detail" in r.json()
    generator.generate.assert_not_called()


def test_ask_corpus_unavailable():
    r = client.post("/api/ask", json={"query": "What happened?", "event_id": "missing"})
    assert r.status_code == 404
    assert "missing" in r.json()["detail"]


def test_ask_generation_error(generator: MagicMock):
    generator.generate.side_effect = GenerationError("Answer generation failed: upstream 500")
    r = client.post("/api/ask", json={"query": "What happened?", "event_id": "flood"})
    assert r.status_code == 502
    assert "upstream 500" in r.json()["detail"]


def test_ask_without_pipeline_returns_503():
    app.state.pipeline = None
    r = client.post("/api/ask", json={"query": "What happened?", "event_id": "flood"})
    assert r.status_code == 503


def test_search():
    r = client.post("/api/search", json={"query": "rain", "event_id": "flood", "top_k": 2})
    assert r.status_code == 200
    data = r.json()
    assert data["event_id"] == "flood"
    assert [h["position_id"] for h in data["results"]] == [1, 2]
    assert data["results"][0]["title"] == "Rain"
    assert data["results"][0]["score"] == pytest.approx(1.0)


def test_search_requires_body():
    r = client.post("/api/search", json={})
    assert r.status_code == 422


def test_select_event_clears_other_event():
    client.post("/api/ask", json={"query": "What happened?", "event_id": "flood"})
    assert client.get("/api/health").json()["cached_event_id"] == "flood"
    r = client.post("/api/events/quake/select")
    assert r.status_code == 200
    assert r.json() == {"event_id": "quake", "cache_cleared": True}
    assert client.get("/api/health").json()["cached_event_id"] is None


def test_event_graph(tmp_path: Path):
    event = {
        "DisNo": "2024-0001",
        "disaster_type": "Flood",
        "knowledge_graph_with_citations": [
            {"source": "Rain", "relation": "caused", "target": "Flood", "n_citations": 2},
        ],
        "total_citations": 2,
        "n_articles": 4,
    }
    (tmp_path / "flood.json").write_text(json.dumps(event), encoding="utf-8")
    r = client.get("/api/events/flood/graph")
    assert r.status_code == 200
    data = r.json()
    assert data["info"]["dis_no"] == "2024-0001"
    assert data["info"]["country"] == "N/A"
    assert [n["id"] for n in data["nodes"]] == ["Rain", "Flood"]
    assert data["edges"][0]["relation"] == "caused"
    assert data["stats"] == {"nodes": 2, "edges": 1, "citations": 2, "articles": 4}


def test_event_graph_missing():
    r = client.get("/api/events/nowhere/graph")
    assert r.status_code == 404
