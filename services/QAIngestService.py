# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-21
# Updated: 2026-01-25
# Description: QAIngestService.py
# -----------------------------------------------------------------------------
from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple

import settings
from chunking.QAChunk import QAChunk
from chunking.QAChunker import QAChunker
from embedding.EmbeddingProvider import EmbeddingProvider
from ingestion.QANormalizer import QANormalizer, RawRecord
from ingestion.QARecordLoader import QARecordLoader, RawSource
from knowledge.KnowledgeRecord import KnowledgeRecord
from utility.errors import QAProviderError
from utility.logging_utils import get_class_logger
from vectorstore.QAVectorStore import QAVectorStore


@dataclass
class IngestionReport:
    loaded: int = 0
    skipped_duplicate: int = 0
    skipped_invalid: int = 0
    skipped_error: int = 0
    chunks_stored: int = 0
    rebuilt: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "loaded": self.loaded,
            "skipped_duplicate": self.skipped_duplicate,
            "skipped_invalid": self.skipped_invalid,
            "skipped_error": self.skipped_error,
            "chunks_stored": self.chunks_stored,
            "rebuilt": self.rebuilt,
        }


class QAIngestService:
    """
    Owns the knowledge-base ingest pipeline:
      - read delimited sources (QARecordLoader)
      - clean + dedupe across all sources combined (QANormalizer)
      - project records to chunks (QAChunker)
      - embed, batches in parallel up to `concurrency`
      - store into the vector index

    Index mutations from this service hold one lock, so a rebuild's clear()
    and its store() never interleave with another ingest.
    """

    def __init__(
        self,
        *,
        store: QAVectorStore,
        embedder: EmbeddingProvider,
        loader: Optional[QARecordLoader] = None,
        normalizer: Optional[QANormalizer] = None,
        chunker: Optional[QAChunker] = None,
        batch_size: int = settings.EMBED_BATCH_SIZE,
        concurrency: int = settings.EMBED_CONCURRENCY,
        logger: logging.Logger | None = None,
    ) -> None:
        if batch_size <= 0 or concurrency <= 0:
            raise ValueError("batch_size and concurrency must be positive")
        self.store = store
        self.embedder = embedder
        self.loader = loader or QARecordLoader()
        self.normalizer = normalizer or QANormalizer()
        self.chunker = chunker or QAChunker()
        self.batch_size = batch_size
        self.concurrency = concurrency
        self.logger = logger or get_class_logger(self.__class__)
        self._mutation_lock = threading.Lock()

    # ------------------------------------------------------------------ bulk
    def ingest(self, sources: Iterable[RawSource], *, rebuild: bool = False) -> IngestionReport:
        """Load every source, dedupe across all of them, embed and store."""
        source_list = list(sources)
        self.logger.info(
            "Ingest start: %d source(s) %s (rebuild=%s)",
            len(source_list),
            [s.name for s in source_list],
            rebuild,
        )
        rows = list(self.loader.read_all(source_list))
        return self.ingest_records(rows, rebuild=rebuild)

    def rebuild(self, sources: Iterable[RawSource]) -> IngestionReport:
        """Full reingestion: the index is cleared and reloaded from `sources`."""
        return self.ingest(sources, rebuild=True)

    def ingest_records(self, raw_records: Iterable[RawRecord], *, rebuild: bool = False) -> IngestionReport:
        # auto-assigned ids continue above what the index already holds
        start_id = 1 if rebuild else self.store.max_record_id() + 1
        norm = self.normalizer.normalize(raw_records, start_id=start_id)
        report = IngestionReport(
            skipped_duplicate=norm.skipped_duplicate,
            skipped_invalid=norm.skipped_invalid,
            rebuilt=rebuild,
        )

        chunks = self.chunker.chunk_records(norm.records)
        embedded, failed_records = self._embed_chunks(chunks)
        report.skipped_error = len(failed_records)
        report.loaded = len(norm.records) - len(failed_records)
        if rebuild and norm.records and not embedded:
            raise QAProviderError(
                f"None of {len(norm.records)} record(s) could be embedded; keeping the existing index",
                operation="rebuild",
            )

        # embeddings are computed before clear() to keep the empty window short
        with self._mutation_lock:
            if rebuild:
                cleared = self.store.clear()
                self.logger.info("Rebuild: cleared %d existing chunk(s)", cleared)
            report.chunks_stored = self.store.store(embedded) if embedded else 0

        self.logger.info("Ingest complete: %s", report.to_dict())
        return report

    # ----------------------------------------------------------- incremental
    def update_record(self, record: KnowledgeRecord) -> int:
        """
        Re-embed one record and replace its chunks. Provider errors propagate;
        the old chunks are only deleted once the new embeddings exist.
        """
        norm = self.normalizer.normalize([record])
        if not norm.records:
            raise ValueError(f"Record {record.id} needs a non-empty question and answer")
        cleaned = norm.records[0]
        if cleaned.id != record.id:
            cleaned = replace(cleaned, id=record.id)

        chunks = self.chunker.chunk_record(cleaned)
        vectors = self.embedder.embed_batch([c.text for c in chunks])
        embedded = [replace(c, embedding=v) for c, v in zip(chunks, vectors)]

        with self._mutation_lock:
            removed = self.store.delete_by_record_id(cleaned.id)
            stored = self.store.store(embedded)

        self.logger.info("Updated record %s: removed=%d stored=%d", cleaned.id, removed, stored)
        return stored

    def delete_record(self, record_id: int) -> int:
        with self._mutation_lock:
            return self.store.delete_by_record_id(record_id)

    def clear(self) -> int:
        with self._mutation_lock:
            return self.store.clear()

    # -------------------------------------------------------------- embedding
    def _embed_chunks(self, chunks: Sequence[QAChunk]) -> Tuple[List[QAChunk], Set[int]]:
        """
        Embed in batches on a bounded pool. A failed batch is retried one
        chunk at a time so a single bad record only costs itself; a record
        with any failed chunk is dropped entirely.
        """
        if not chunks:
            return [], set()

        batches = [list(chunks[i:i + self.batch_size]) for i in range(0, len(chunks), self.batch_size)]
        self.logger.info(
            "Embedding %d chunk(s) in %d batch(es) (batch=%d, concurrency=%d)",
            len(chunks),
            len(batches),
            self.batch_size,
            self.concurrency,
        )

        with ThreadPoolExecutor(max_workers=self.concurrency, thread_name_prefix="qa-embed") as pool:
            batch_results = list(pool.map(self._embed_one_batch, batches))

        failed: Set[int] = set()
        vectors: List[Optional[List[float]]] = []
        for batch, result in zip(batches, batch_results):
            for chunk, vec in zip(batch, result):
                vectors.append(vec)
                if vec is None:
                    failed.add(chunk.record_id)

        embedded = [
            replace(chunk, embedding=vec)
            for chunk, vec in zip(chunks, vectors)
            if vec is not None and chunk.record_id not in failed
        ]
        if failed:
            self.logger.warning("Skipped %d record(s) after embedding errors: %s", len(failed), sorted(failed))
        return embedded, failed

    def _embed_one_batch(self, batch: List[QAChunk]) -> List[Optional[List[float]]]:
        try:
            return list(self.embedder.embed_batch([c.text for c in batch]))
        except (QAProviderError, ValueError) as e:
            self.logger.warning("Embedding batch of %d failed, retrying per chunk: %s", len(batch), e)

        out: List[Optional[List[float]]] = []
        for chunk in batch:
            try:
                out.append(self.embedder.embed(chunk.text))
            except (QAProviderError, ValueError) as e:
                self.logger.error("Embedding failed for record %s: %s", chunk.record_id, e)
                out.append(None)
        return out
