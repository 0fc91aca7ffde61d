# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-22
# Description: schema.py
# -----------------------------------------------------------------------------
"""
SQLAlchemy model for the chunk table.

One row per chunk: the chunk text, its pgvector embedding and JSON metadata
(question, category, source, chunk_index, total_chunks). `record_id` is the
owning knowledge record; a record may own several rows.
"""
from sqlalchemy import Column, DateTime, Index, Integer, MetaData, Table, Text, func, literal_column
from sqlalchemy.dialects.postgresql import JSONB
from pgvector.sqlalchemy import Vector

import settings


def ts_config_literal(ts_config: str | None = None):
    """`'english'::regconfig`, inlined so queries match the expression index."""
    return literal_column(f"'{ts_config or settings.TEXT_SEARCH_CONFIG}'::regconfig")


def build_chunk_table(
        metadata: MetaData,
        *,
        name: str | None = None,
        dimension: int | None = None,
        ts_config: str | None = None,
) -> Table:
    name = name or settings.VECTOR_TABLE
    dimension = dimension or settings.EMBEDDING_DIM

    table = Table(
        name,
        metadata,
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("record_id", Integer, nullable=False),
        Column("chunk_text", Text, nullable=False),
        Column("embedding", Vector(dim=dimension), nullable=False),
        Column("metadata", JSONB, nullable=False),
        Column("created_at", DateTime(timezone=True), server_default=func.now()),
    )

    Index(f"{name}_record_id_idx", table.c.record_id)
    Index(
        f"{name}_vector_idx",
        table.c.embedding,
        # hnsw is usable on an empty table
        postgresql_using="hnsw",
        postgresql_with={"m": 16, "ef_construction": 64},
        postgresql_ops={"embedding": "vector_cosine_ops"},
    )
    Index(
        f"{name}_fts_idx",
        func.to_tsvector(ts_config_literal(ts_config), table.c.chunk_text),
        postgresql_using="gin",
    )
    return table
