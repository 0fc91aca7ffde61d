# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-23
# Description: MemoryQAVectorStore
# -----------------------------------------------------------------------------
import re
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
from rank_bm25 import BM25Plus

import settings
from chunking.QAChunk import QAChunk
from knowledge.RagTypes import SearchResult
from utility.errors import QAConfigurationError
from utility.logging_utils import get_class_logger
from vectorstore.QAVectorStore import IndexStats, QAVectorStore, compute_stats

_TOKEN_RE = re.compile(r"\w+")

# small list so "what is an ..." questions do not match every chunk
_STOPWORDS = frozenset(
    "a an and are as at be by can do does for from how i in is it its of on or "
    "that the this to was what when where which who why will with you your".split()
)


def tokenize(text: str) -> List[str]:
    return [t for t in _TOKEN_RE.findall((text or "").lower()) if t not in _STOPWORDS]


@dataclass
class MemoryQAVectorStore(QAVectorStore):
    """
    In-process chunk index for local runs and tests.

    Vector leg: cosine similarity over stored embeddings (numpy).
    Lexical leg: BM25+ over chunks sharing at least one query term, with the
    score squashed to s/(s+1) to match the postgres backend's [0, 1) range.
    """

    embedding_dim: int = settings.EMBEDDING_DIM
    logger: Any = None
    _rows: Dict[int, QAChunk] = field(default_factory=dict, init=False, repr=False)
    _next_id: int = field(default=1, init=False, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False)
    _matrix: Optional[np.ndarray] = field(default=None, init=False, repr=False)
    _matrix_ids: List[int] = field(default_factory=list, init=False, repr=False)
    _bm25: Optional[BM25Plus] = field(default=None, init=False, repr=False)
    _bm25_tokens: List[List[str]] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        self.logger = self.logger or get_class_logger(self.__class__)
        self.logger.info("MemoryQAVectorStore initialised (dim=%d)", self.embedding_dim)

    @property
    def dimension(self) -> int:
        return self.embedding_dim

    def initialize(self) -> None:
        # nothing to verify in process
        return None

    def test_connection(self) -> bool:
        return True

    def _invalidate(self) -> None:
        self._matrix = None
        self._bm25 = None

    def store(self, chunks: Sequence[QAChunk]) -> int:
        prepared: List[QAChunk] = []
        for chunk in chunks:
            if chunk.embedding is None:
                raise ValueError(f"Chunk for record {chunk.record_id} has no embedding")
            if len(chunk.embedding) != self.embedding_dim:
                raise QAConfigurationError(
                    f"Chunk for record {chunk.record_id} has dimension {len(chunk.embedding)}, "
                    f"index expects {self.embedding_dim}"
                )
            prepared.append(chunk)

        now = datetime.now(timezone.utc)
        with self._lock:
            for chunk in prepared:
                row = replace(chunk, id=self._next_id, created_at=now, embedding=list(chunk.embedding))
                self._rows[row.id] = row
                self._next_id += 1
            self._invalidate()

        self.logger.info("Stored %d chunk(s) in memory index", len(prepared))
        return len(prepared)

    def delete_by_record_id(self, record_id: int) -> int:
        with self._lock:
            doomed = [cid for cid, c in self._rows.items() if c.record_id == record_id]
            for cid in doomed:
                del self._rows[cid]
            if doomed:
                self._invalidate()
        self.logger.info("Deleted %d chunk(s) for record %s", len(doomed), record_id)
        return len(doomed)

    def clear(self) -> int:
        with self._lock:
            count = len(self._rows)
            self._rows.clear()
            self._invalidate()
        self.logger.info("Cleared %d chunk(s) from memory index", count)
        return count

    def _ensure_matrix(self) -> None:
        if self._matrix is not None:
            return
        self._matrix_ids = sorted(self._rows)
        if not self._matrix_ids:
            self._matrix = np.empty((0, self.embedding_dim), dtype=np.float32)
            return
        arr = np.asarray([self._rows[cid].embedding for cid in self._matrix_ids], dtype=np.float32)
        norms = np.linalg.norm(arr, axis=1, keepdims=True)
        self._matrix = arr / np.where(norms == 0, 1.0, norms)

    def _ensure_bm25(self) -> None:
        if self._bm25 is not None or not self._rows:
            return
        self._matrix_ids = sorted(self._rows)
        self._bm25_tokens = [tokenize(self._rows[cid].text) for cid in self._matrix_ids]
        # BM25Plus divides by the average document length
        self._bm25 = BM25Plus([toks or ["_"] for toks in self._bm25_tokens])

    def vector_search(
            self,
            query_vector: Sequence[float],
            top_k: int,
            similarity_floor: float,
    ) -> List[SearchResult]:
        if len(query_vector) != self.embedding_dim:
            raise QAConfigurationError(
                f"Query vector has dimension {len(query_vector)}, index expects {self.embedding_dim}"
            )
        if top_k <= 0:
            return []

        q = np.asarray(query_vector, dtype=np.float32)
        q_norm = float(np.linalg.norm(q))
        if q_norm == 0.0:
            return []

        with self._lock:
            self._ensure_matrix()
            if self._matrix.shape[0] == 0:
                return []
            sims = self._matrix @ (q / q_norm)
            ids = list(self._matrix_ids)
            rows = dict(self._rows)

        order = sorted(range(len(ids)), key=lambda i: (-float(sims[i]), ids[i]))
        results: List[SearchResult] = []
        for i in order:
            sim = float(sims[i])
            if sim <= similarity_floor:
                break
            chunk = rows[ids[i]]
            results.append(SearchResult(chunk=chunk, score=sim, source=chunk.metadata.source or "Unknown"))
            if len(results) >= top_k:
                break
        return results

    def lexical_search(self, query_text: str, top_k: int) -> List[SearchResult]:
        query_tokens = tokenize(query_text)
        if not query_tokens or top_k <= 0:
            return []

        with self._lock:
            self._ensure_bm25()
            if self._bm25 is None:
                return []
            scores = self._bm25.get_scores(query_tokens)
            ids = list(self._matrix_ids)
            doc_tokens = list(self._bm25_tokens)
            rows = dict(self._rows)

        wanted = set(query_tokens)
        scored = [
            (float(scores[i]), ids[i])
            for i in range(len(ids))
            if wanted.intersection(doc_tokens[i]) and scores[i] > 0
        ]
        scored.sort(key=lambda p: (-p[0], p[1]))

        results: List[SearchResult] = []
        for raw, cid in scored[:top_k]:
            chunk = rows[cid]
            results.append(
                SearchResult(chunk=chunk, score=raw / (raw + 1.0), source=chunk.metadata.source or "Unknown")
            )
        return results

    def get_chunk(self, chunk_id: int) -> Optional[QAChunk]:
        with self._lock:
            return self._rows.get(chunk_id)

    def stats(self) -> IndexStats:
        with self._lock:
            total_chunks = len(self._rows)
            total_records = len({c.record_id for c in self._rows.values()})
        return compute_stats(total_chunks, total_records)

    def max_record_id(self) -> int:
        with self._lock:
            return max((c.record_id for c in self._rows.values()), default=0)
