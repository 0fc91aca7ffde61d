# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-23
# Description: test_memory_vector_store.py
# -----------------------------------------------------------------------------
import pytest

from chunking.QAChunk import ChunkMetadata, QAChunk
from utility.errors import QAConfigurationError
from vectorstore.MemoryQAVectorStore import MemoryQAVectorStore


def _chunk(record_id: int, text: str, embedding, source: str = "test.csv") -> QAChunk:
    return QAChunk(
        text=text,
        metadata=ChunkMetadata(record_id=record_id, question=text, source=source),
        embedding=list(embedding),
    )


@pytest.fixture
def store() -> MemoryQAVectorStore:
    s = MemoryQAVectorStore(embedding_dim=3)
    s.store([
        _chunk(1, "accessory dwelling unit for an aging parent", [1.0, 0.0, 0.0]),
        _chunk(2, "medicare coverage for home health", [0.0, 1.0, 0.0]),
        _chunk(3, "dwelling costs and budgeting", [0.8, 0.6, 0.0]),
    ])
    return s


def test_store_assigns_ids_and_timestamps(store):
    chunk = store.get_chunk(1)
    assert chunk is not None
    assert chunk.id == 1
    assert chunk.created_at is not None


def test_vector_search_orders_by_similarity_and_applies_floor(store):
    hits = store.vector_search([1.0, 0.0, 0.0], top_k=5, similarity_floor=0.5)

    assert [h.chunk_id for h in hits] == [1, 3]
    assert hits[0].score == pytest.approx(1.0)
    assert hits[1].score == pytest.approx(0.8)
    assert all(h.source == "test.csv" for h in hits)


def test_floor_is_exclusive(store):
    # chunk 1 matches exactly, so a floor of 1.0 excludes it
    assert store.vector_search([1.0, 0.0, 0.0], top_k=5, similarity_floor=1.0) == []


def test_vector_search_rejects_wrong_dimension(store):
    with pytest.raises(QAConfigurationError):
        store.vector_search([1.0, 0.0], top_k=1, similarity_floor=0.0)


def test_store_rejects_wrong_dimension(store):
    with pytest.raises(QAConfigurationError):
        store.store([_chunk(9, "bad", [1.0])])


def test_lexical_search_scores_in_unit_interval_and_needs_overlap(store):
    hits = store.lexical_search("dwelling", top_k=5)

    assert {h.chunk_id for h in hits} == {1, 3}
    assert all(0.0 < h.score < 1.0 for h in hits)
    assert store.lexical_search("dementia", top_k=5) == []
    assert store.lexical_search("   ", top_k=5) == []


def test_delete_by_record_id_and_stats(store):
    assert store.delete_by_record_id(2) == 1
    assert store.delete_by_record_id(2) == 0

    stats = store.stats()
    assert stats.total_chunks == 2
    assert stats.total_records == 2
    assert stats.avg_chunks_per_record == 1.0
    assert store.lexical_search("medicare", top_k=5) == []


def test_clear_empties_index(store):
    assert store.clear() == 3
    stats = store.stats()

    assert stats.total_chunks == 0
    assert stats.avg_chunks_per_record == 0.0
    assert store.vector_search([1.0, 0.0, 0.0], top_k=5, similarity_floor=0.0) == []
    assert store.lexical_search("dwelling", top_k=5) == []


def test_max_record_id(store):
    assert store.max_record_id() == 3
    store.clear()
    assert store.max_record_id() == 0
