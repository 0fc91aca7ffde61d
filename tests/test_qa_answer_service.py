# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-24
# Description: test_qa_answer_service.py
# -----------------------------------------------------------------------------
import pytest

from chunking.QAChunk import ChunkMetadata, QAChunk
from conftest import ADU_RECORD, UNRELATED_RECORDS, ScriptedChat, TopicEmbedder
from knowledge.RagTypes import ContentEvent, ErrorEvent, MetadataEvent, SearchResult
from ranking.QAHybridRanker import QAHybridRanker
from services.QAAnswerService import (
    NO_CONTEXT,
    STREAM_ERROR_MESSAGE,
    QAAnswerService,
    calculate_confidence,
)
from services.QAQueryService import QAQueryService
from utility.errors import QAProviderError

ADU_QUERY = "What is an ADU and how can it be used for elder care?"


def _result(chunk_id: int, score: float, text: str = "text") -> SearchResult:
    chunk = QAChunk(
        text=text,
        metadata=ChunkMetadata(record_id=chunk_id, question=f"Q{chunk_id}?", source="kb.csv"),
        id=chunk_id,
    )
    return SearchResult(chunk=chunk, score=score, source="kb.csv")


@pytest.fixture
def loaded(ingest_service):
    ingest_service.ingest_records([ADU_RECORD, *UNRELATED_RECORDS])
    return ingest_service


# ---- confidence ------------------------------------------------------------

def test_confidence_is_zero_without_sources():
    assert calculate_confidence([]) == 0.0


def test_confidence_is_mean_score_clamped():
    assert calculate_confidence([_result(1, 0.8), _result(2, 0.6)]) == pytest.approx(0.7)
    assert calculate_confidence([_result(1, 1.4), _result(2, 1.2)]) == 1.0
    assert calculate_confidence([_result(1, -0.5)]) == 0.0


# ---- prompt ----------------------------------------------------------------

def test_context_sections_are_numbered_and_labelled(answer_service):
    context = answer_service.build_context([_result(1, 0.9, "alpha"), _result(2, 0.8, "beta")])

    assert context == (
        "Source 1 (kb.csv):\nQuestion: Q1?\nContent: alpha\n---"
        "\n\n"
        "Source 2 (kb.csv):\nQuestion: Q2?\nContent: beta\n---"
    )
    assert answer_service.build_context([]) == NO_CONTEXT


def test_fit_context_keeps_first_and_drops_overflow(query_service, chat):
    svc = QAAnswerService(query_service=query_service, completion=chat, max_context_chars=60)
    results = [_result(1, 0.9, "x" * 100), _result(2, 0.8, "short")]

    assert [r.chunk_id for r in svc.fit_context(results)] == [1]


# ---- batch -----------------------------------------------------------------

def test_answer_grounds_prompt_in_retrieved_sources(loaded, answer_service, chat):
    resp = answer_service.answer(ADU_QUERY)

    assert resp.answer == "Here is some guidance."
    assert resp.sources and resp.sources[0].chunk.metadata.question == "What is an ADU?"
    assert 0.0 < resp.confidence <= 1.0
    assert "Source 1 (Unknown):\nQuestion: What is an ADU?" in chat.prompts[0]
    assert chat.prompts[0].endswith(f"User Query: {ADU_QUERY}\n")


def test_answer_propagates_provider_failure(loaded, query_service):
    svc = QAAnswerService(query_service=query_service, completion=ScriptedChat(fail_complete=True))
    with pytest.raises(QAProviderError):
        svc.answer(ADU_QUERY)


# ---- streaming -------------------------------------------------------------

def test_stream_emits_metadata_then_content(loaded, answer_service):
    events = list(answer_service.answer_stream(ADU_QUERY))

    assert isinstance(events[0], MetadataEvent)
    assert events[0].sources
    assert [e.content for e in events[1:]] == ["Here is ", "some ", "guidance."]
    assert all(isinstance(e, ContentEvent) for e in events[1:])


def test_stream_metadata_sent_even_without_sources(answer_service):
    events = list(answer_service.answer_stream(ADU_QUERY))

    assert events[0] == MetadataEvent(confidence=0.0, sources=[])
    assert len(events) == 4


def test_stream_error_is_terminal(loaded, query_service):
    chat = ScriptedChat(fail_after=1)
    svc = QAAnswerService(query_service=query_service, completion=chat)
    events = list(svc.answer_stream(ADU_QUERY))

    assert [e.type for e in events] == ["metadata", "content", "error"]
    assert events[-1] == ErrorEvent(message=STREAM_ERROR_MESSAGE)
    assert chat.closed


def test_stream_retrieval_failure_still_sends_metadata_first(memory_store, chat):
    embedder = TopicEmbedder(fail_on=["ADU"])
    query_service = QAQueryService(embedder=embedder, ranker=QAHybridRanker(memory_store))
    svc = QAAnswerService(query_service=query_service, completion=chat)

    events = list(svc.answer_stream(ADU_QUERY))

    assert [e.type for e in events] == ["metadata", "error"]
    assert chat.prompts == []


def test_stream_stops_when_consumer_closes(loaded, answer_service, chat):
    stream = answer_service.answer_stream(ADU_QUERY)
    assert next(stream).type == "metadata"
    assert next(stream).type == "content"

    stream.close()

    assert chat.closed
    assert chat.pulled == 1


def test_stream_honours_should_stop_before_provider_call(loaded, answer_service, chat):
    events = list(answer_service.answer_stream(ADU_QUERY, should_stop=lambda: True))

    assert [e.type for e in events] == ["metadata"]
    assert chat.prompts == []


def test_stream_honours_should_stop_mid_stream(loaded, answer_service, chat):
    seen = []

    def stop() -> bool:
        return len(seen) >= 2

    for event in answer_service.answer_stream(ADU_QUERY, should_stop=stop):
        seen.append(event)

    assert [e.type for e in seen] == ["metadata", "content"]
    assert chat.closed


def test_stream_stopped_up_front_skips_retrieval(loaded, answer_service, embedder):
    embedded_before = list(embedder.calls)

    events = list(answer_service.answer_stream(ADU_QUERY, should_stop=lambda: True))

    assert len(events) == 1
    assert isinstance(events[0], MetadataEvent)
    assert events[0].sources == []
    assert embedder.calls == embedded_before
