# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-15
# Updated: 2026-01-22
# Description: QAVectorStore
# -----------------------------------------------------------------------------

from dataclasses import dataclass
from typing import Protocol, Sequence, List, Optional, runtime_checkable

from chunking.QAChunk import QAChunk
from knowledge.RagTypes import SearchResult


@dataclass(frozen=True)
class IndexStats:
    total_chunks: int
    total_records: int
    avg_chunks_per_record: float

    def to_dict(self) -> dict:
        return {
            "total_chunks": self.total_chunks,
            "total_records": self.total_records,
            "avg_chunks_per_record": self.avg_chunks_per_record,
        }


def compute_stats(total_chunks: int, total_records: int) -> IndexStats:
    avg = round(total_chunks / total_records, 2) if total_records else 0.0
    return IndexStats(total_chunks=total_chunks, total_records=total_records, avg_chunks_per_record=avg)


@runtime_checkable
class QAVectorStore(Protocol):
    """
    Sole owner of chunk storage. Does no score fusion; vector and lexical
    searches return their own scores for the ranker to combine.
    """

    @property
    def dimension(self) -> int:
        ...

    def initialize(self) -> None:
        """Raise QAConfigurationError when the backing structures are missing."""
        ...

    def test_connection(self) -> bool:
        ...

    def store(self, chunks: Sequence[QAChunk]) -> int:
        ...

    def delete_by_record_id(self, record_id: int) -> int:
        ...

    def clear(self) -> int:
        ...

    def vector_search(
            self,
            query_vector: Sequence[float],
            top_k: int,
            similarity_floor: float,
    ) -> List[SearchResult]:
        ...

    def lexical_search(self, query_text: str, top_k: int) -> List[SearchResult]:
        ...

    def get_chunk(self, chunk_id: int) -> Optional[QAChunk]:
        ...

    def stats(self) -> IndexStats:
        ...

    def max_record_id(self) -> int:
        """Highest record id held, or 0 when empty."""
        ...
