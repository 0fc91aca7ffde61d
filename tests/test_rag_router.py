# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-26
# Description: test_rag_router.py
# -----------------------------------------------------------------------------
import json

import pytest
from starlette.testclient import TestClient

from api.dependencies import get_admin_service, get_answer_service, get_query_service
from api.main import app
from conftest import ADU_RECORD, UNRELATED_RECORDS, ScriptedChat
from services.QAAdminService import QAAdminService
from services.QAAnswerService import QAAnswerService

ADU_QUERY = "What is an ADU and how can it be used for elder care?"


@pytest.fixture
def client(memory_store, ingest_service, query_service, answer_service, tmp_path):
    admin = QAAdminService(
        store=memory_store,
        ingest_service=ingest_service,
        answer_service=answer_service,
        data_dir=str(tmp_path),
    )
    app.dependency_overrides[get_query_service] = lambda: query_service
    app.dependency_overrides[get_answer_service] = lambda: answer_service
    app.dependency_overrides[get_admin_service] = lambda: admin
    yield TestClient(app)
    app.dependency_overrides.clear()


def _sse_payloads(text: str):
    return [json.loads(line[len("data: "):]) for line in text.splitlines() if line.startswith("data: ")]


def test_health_is_cheap(client):
    resp = client.get("/health/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_search_returns_answer_and_trimmed_sources(client, ingest_service):
    long_answer = "An ADU is a small secondary dwelling. " + "It can shelter a relative nearby. " * 10
    ingest_service.ingest_records([{"question": ADU_RECORD["question"], "answer": long_answer}, *UNRELATED_RECORDS])

    resp = client.post("/rag/search", json={"query": ADU_QUERY})

    assert resp.status_code == 200
    data = resp.json()
    assert data["answer"] == "Here is some guidance."
    assert data["total_sources"] == len(data["sources"]) >= 1
    assert 0 < data["confidence"] <= 1
    top = data["sources"][0]
    assert top["question"] == "What is an ADU?"
    assert len(top["content"]) == 203 and top["content"].endswith("...")


def test_blank_query_is_rejected(client):
    assert client.post("/rag/search", json={"query": "   "}).status_code == 400
    assert client.post("/rag/search", json={"query": ""}).status_code == 422


def test_provider_failure_maps_to_bad_gateway(client, query_service):
    failing = QAAnswerService(query_service=query_service, completion=ScriptedChat(fail_complete=True))
    app.dependency_overrides[get_answer_service] = lambda: failing

    resp = client.post("/rag/search", json={"query": ADU_QUERY})

    assert resp.status_code == 502


def test_stream_frames_metadata_content_then_end(client, ingest_service):
    ingest_service.ingest_records([ADU_RECORD, *UNRELATED_RECORDS])

    resp = client.post("/rag/search/stream", json={"query": ADU_QUERY})

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/event-stream")
    types = [p["type"] for p in _sse_payloads(resp.text)]
    assert types == ["metadata", "content", "content", "content", "end"]


def test_stream_error_frame_precedes_end(client, query_service):
    failing = QAAnswerService(query_service=query_service, completion=ScriptedChat(fail_after=0))
    app.dependency_overrides[get_answer_service] = lambda: failing

    payloads = _sse_payloads(client.post("/rag/search/stream", json={"query": ADU_QUERY}).text)

    assert [p["type"] for p in payloads] == ["metadata", "error", "end"]
    assert payloads[1]["message"] == "Failed to generate answer"


def test_similar_returns_ranked_sources(client, ingest_service):
    ingest_service.ingest_records([ADU_RECORD, *UNRELATED_RECORDS])

    resp = client.post("/rag/similar", json={"query": ADU_QUERY, "top_k": 3})

    assert resp.status_code == 200
    results = resp.json()["results"]
    assert 1 <= len(results) <= 3
    assert results[0]["question"] == "What is an ADU?"
