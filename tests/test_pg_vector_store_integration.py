# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-27
# Description: test_pg_vector_store_integration.py
# -----------------------------------------------------------------------------
import os

import pytest

from chunking.QAChunk import ChunkMetadata, QAChunk
from utility.errors import QAConfigurationError
from vectorstore.PgQAVectorStore import PgQAVectorStore

TEST_TABLE = "qa_embeddings_pytest"


def _database_url_or_skip() -> str:
    url = os.getenv("DATABASE_URL")
    if not url:
        pytest.skip("Missing env var DATABASE_URL; skipping postgres integration test")
    return url


def _chunk(record_id: int, text: str, embedding) -> QAChunk:
    return QAChunk(
        text=text,
        metadata=ChunkMetadata(record_id=record_id, question=text, source="pytest.csv"),
        embedding=list(embedding),
    )


@pytest.fixture
def pg_store():
    store = PgQAVectorStore(database_url=_database_url_or_skip(), table_name=TEST_TABLE, embedding_dim=3)
    store.create_schema()
    store.clear()
    yield store
    store.clear()


@pytest.mark.integration
def test_store_search_and_stats_roundtrip(pg_store):
    stored = pg_store.store([
        _chunk(1, "An accessory dwelling unit can house an aging parent", [1.0, 0.0, 0.0]),
        _chunk(2, "Medicare covers some home health services", [0.0, 1.0, 0.0]),
    ])
    assert stored == 2

    vector_hits = pg_store.vector_search([1.0, 0.0, 0.0], top_k=5, similarity_floor=0.5)
    assert [h.chunk.record_id for h in vector_hits] == [1]
    assert vector_hits[0].score == pytest.approx(1.0, abs=1e-6)

    lexical_hits = pg_store.lexical_search("dwelling unit", top_k=5)
    assert [h.chunk.record_id for h in lexical_hits] == [1]
    assert 0.0 < lexical_hits[0].score < 1.0

    stats = pg_store.stats()
    assert (stats.total_chunks, stats.total_records) == (2, 2)

    assert pg_store.delete_by_record_id(2) == 1
    assert pg_store.get_chunk(vector_hits[0].chunk_id).metadata.source == "pytest.csv"


@pytest.mark.integration
def test_dimension_mismatch_is_rejected(pg_store):
    with pytest.raises(QAConfigurationError):
        pg_store.vector_search([1.0, 0.0], top_k=1, similarity_floor=0.0)
