# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-16
# Updated: 2026-01-23
# Description: PgQAVectorStore
# -----------------------------------------------------------------------------
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import Engine, MetaData, create_engine, delete, func, insert, literal, select, text
from sqlalchemy.engine import Row
from sqlalchemy.exc import SQLAlchemyError

import settings
from chunking.QAChunk import ChunkMetadata, QAChunk
from knowledge.RagTypes import SearchResult
from utility.errors import QAConfigurationError
from utility.logging_utils import get_class_logger
from vectorstore.QAVectorStore import IndexStats, QAVectorStore, compute_stats
from vectorstore.schema import build_chunk_table, ts_config_literal

_VECTOR_TYPE_RE = re.compile(r"^vector\((\d+)\)$")


def _sqlalchemy_url(database_url: str) -> str:
    # psycopg 3 is the installed driver; plain postgres URLs default to psycopg2
    for prefix in ("postgresql://", "postgres://"):
        if database_url.startswith(prefix):
            return "postgresql+psycopg://" + database_url[len(prefix):]
    return database_url


@dataclass
class PgQAVectorStore(QAVectorStore):
    """
    Chunk index in PostgreSQL: pgvector cosine search plus full-text search
    over chunk_text. The only component that issues similarity or full-text SQL.

    Every mutating call runs in its own transaction.
    """

    database_url: str = ""
    table_name: str = settings.VECTOR_TABLE
    embedding_dim: int = settings.EMBEDDING_DIM
    ts_config: str = settings.TEXT_SEARCH_CONFIG
    store_batch_size: int = settings.STORE_BATCH_SIZE
    engine: Optional[Engine] = None
    logger: Any = None
    _initialized: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        self.logger = self.logger or get_class_logger(self.__class__)

        if self.engine is None:
            if not self.database_url:
                raise QAConfigurationError("DATABASE_URL is required for the postgres vector index")
            self.engine = create_engine(_sqlalchemy_url(self.database_url), pool_pre_ping=True)

        self.metadata = MetaData()
        self.table = build_chunk_table(
            self.metadata,
            name=self.table_name,
            dimension=self.embedding_dim,
            ts_config=self.ts_config,
        )
        self.logger.info(
            "PgQAVectorStore configured (table=%s, dim=%d, ts_config=%s)",
            self.table_name,
            self.embedding_dim,
            self.ts_config,
        )

    @property
    def dimension(self) -> int:
        return self.embedding_dim

    # ------------------------------------------------------------------ setup
    def create_schema(self) -> None:
        """Install pgvector and create the chunk table with its indexes (idempotent)."""
        self.logger.info("Creating vector extension and table '%s' if missing", self.table_name)
        with self.engine.begin() as conn:
            conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
        self.metadata.create_all(self.engine, checkfirst=True)
        self._initialized = False

    def initialize(self) -> None:
        """
        Verify the extension, the table and the embedding column dimension.
        Nothing is created here; a fresh database must run create_schema() first.
        """
        try:
            with self.engine.connect() as conn:
                has_ext = conn.execute(
                    text("SELECT 1 FROM pg_extension WHERE extname = 'vector'")
                ).first()
                if not has_ext:
                    raise QAConfigurationError(
                        "pgvector extension is not installed; run the schema setup first"
                    )

                col_type = conn.execute(
                    text(
                        "SELECT format_type(a.atttypid, a.atttypmod) "
                        "FROM pg_attribute a "
                        "WHERE a.attrelid = to_regclass(:table) AND a.attname = 'embedding'"
                    ),
                    {"table": self.table_name},
                ).scalar()
        except SQLAlchemyError as e:
            self.logger.error("Vector index check failed: %s", e)
            raise QAConfigurationError(f"Cannot reach vector index database: {e}") from e

        if col_type is None:
            raise QAConfigurationError(
                f"Table '{self.table_name}' not found; run the schema setup first"
            )

        match = _VECTOR_TYPE_RE.match(col_type)
        if not match or int(match.group(1)) != self.embedding_dim:
            raise QAConfigurationError(
                f"Column {self.table_name}.embedding is {col_type}, expected vector({self.embedding_dim})"
            )

        self._initialized = True
        self.logger.info("Vector index '%s' verified (%s)", self.table_name, col_type)

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            self.initialize()

    def test_connection(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            self.logger.error("Postgres connection failed: %s", e)
            return False

    # --------------------------------------------------------------- mutation
    def store(self, chunks: Sequence[QAChunk]) -> int:
        """Insert chunks as new rows. Existing rows are never touched."""
        self._ensure_initialized()
        if not chunks:
            return 0

        rows: List[Dict[str, Any]] = []
        for chunk in chunks:
            if chunk.embedding is None:
                raise ValueError(f"Chunk for record {chunk.record_id} has no embedding")
            if len(chunk.embedding) != self.embedding_dim:
                raise QAConfigurationError(
                    f"Chunk for record {chunk.record_id} has dimension {len(chunk.embedding)}, "
                    f"index expects {self.embedding_dim}"
                )
            rows.append({
                "record_id": chunk.record_id,
                "chunk_text": chunk.text,
                "embedding": list(chunk.embedding),
                "metadata": chunk.to_metadata(),
            })

        try:
            with self.engine.begin() as conn:
                for i in range(0, len(rows), self.store_batch_size):
                    conn.execute(insert(self.table), rows[i:i + self.store_batch_size])
        except SQLAlchemyError as e:
            self.logger.error("Failed to store %d chunk(s): %s", len(rows), e)
            raise

        self.logger.info("Stored %d chunk(s) in '%s'", len(rows), self.table_name)
        return len(rows)

    def delete_by_record_id(self, record_id: int) -> int:
        self._ensure_initialized()
        try:
            with self.engine.begin() as conn:
                res = conn.execute(delete(self.table).where(self.table.c.record_id == record_id))
        except SQLAlchemyError as e:
            self.logger.error("Failed to delete chunks for record %s: %s", record_id, e)
            raise

        self.logger.info("Deleted %d chunk(s) for record %s", res.rowcount, record_id)
        return res.rowcount

    def clear(self) -> int:
        self._ensure_initialized()
        try:
            with self.engine.begin() as conn:
                res = conn.execute(delete(self.table))
        except SQLAlchemyError as e:
            self.logger.error("Failed to clear '%s': %s", self.table_name, e)
            raise

        self.logger.info("Cleared %d chunk(s) from '%s'", res.rowcount, self.table_name)
        return res.rowcount

    # ----------------------------------------------------------------- search
    def vector_search(
            self,
            query_vector: Sequence[float],
            top_k: int,
            similarity_floor: float,
    ) -> List[SearchResult]:
        self._ensure_initialized()
        if len(query_vector) != self.embedding_dim:
            raise QAConfigurationError(
                f"Query vector has dimension {len(query_vector)}, index expects {self.embedding_dim}"
            )
        if top_k <= 0:
            return []

        t = self.table
        distance = t.c.embedding.cosine_distance(list(query_vector))
        similarity = (literal(1.0) - distance).label("similarity")
        stmt = (
            select(t.c.id, t.c.record_id, t.c.chunk_text, t.c.metadata, t.c.created_at, similarity)
            .where(literal(1.0) - distance > similarity_floor)
            .order_by(distance, t.c.id)
            .limit(top_k)
        )

        try:
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).all()
        except SQLAlchemyError as e:
            self.logger.error("Vector search failed: %s", e)
            raise

        self.logger.debug("Vector search returned %d row(s) (floor=%.2f)", len(rows), similarity_floor)
        return [self._to_result(r, float(r.similarity)) for r in rows]

    def lexical_search(self, query_text: str, top_k: int) -> List[SearchResult]:
        """
        Full-text match with plainto_tsquery. ts_rank_cd normalisation 32
        maps the rank to rank/(rank+1), so scores fall in [0, 1).
        """
        self._ensure_initialized()
        if not (query_text or "").strip() or top_k <= 0:
            return []

        t = self.table
        cfg = ts_config_literal(self.ts_config)
        tsv = func.to_tsvector(cfg, t.c.chunk_text)
        tsq = func.plainto_tsquery(cfg, query_text)
        rank = func.ts_rank_cd(tsv, tsq, 32).label("keyword_score")
        stmt = (
            select(t.c.id, t.c.record_id, t.c.chunk_text, t.c.metadata, t.c.created_at, rank)
            .where(tsv.op("@@")(tsq))
            .order_by(rank.desc(), t.c.id)
            .limit(top_k)
        )

        try:
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).all()
        except SQLAlchemyError as e:
            self.logger.error("Lexical search failed: %s", e)
            raise

        self.logger.debug("Lexical search returned %d row(s)", len(rows))
        return [self._to_result(r, float(r.keyword_score)) for r in rows]

    def get_chunk(self, chunk_id: int) -> Optional[QAChunk]:
        self._ensure_initialized()
        t = self.table
        stmt = select(t.c.id, t.c.record_id, t.c.chunk_text, t.c.metadata, t.c.created_at).where(t.c.id == chunk_id)
        with self.engine.connect() as conn:
            row = conn.execute(stmt).first()
        return self._to_chunk(row) if row is not None else None

    def stats(self) -> IndexStats:
        self._ensure_initialized()
        t = self.table
        stmt = select(func.count(), func.count(t.c.record_id.distinct())).select_from(t)
        try:
            with self.engine.connect() as conn:
                total_chunks, total_records = conn.execute(stmt).one()
        except SQLAlchemyError as e:
            self.logger.error("Failed to read stats for '%s': %s", self.table_name, e)
            raise
        return compute_stats(int(total_chunks), int(total_records))

    def max_record_id(self) -> int:
        self._ensure_initialized()
        t = self.table
        stmt = select(func.coalesce(func.max(t.c.record_id), 0))
        try:
            with self.engine.connect() as conn:
                return int(conn.execute(stmt).scalar_one())
        except SQLAlchemyError as e:
            self.logger.error("Failed to read max record id for '%s': %s", self.table_name, e)
            raise

    # ---------------------------------------------------------------- helpers
    @staticmethod
    def _to_chunk(row: Row) -> QAChunk:
        m = row._mapping
        meta = dict(m["metadata"] or {})
        meta["id"] = m["record_id"]
        return QAChunk(
            id=m["id"],
            text=m["chunk_text"],
            metadata=ChunkMetadata.from_dict(meta),
            created_at=m["created_at"],
        )

    def _to_result(self, row: Row, score: float) -> SearchResult:
        chunk = self._to_chunk(row)
        return SearchResult(chunk=chunk, score=score, source=chunk.metadata.source or "Unknown")
