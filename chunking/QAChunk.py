# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-10
# Updated: 2026-01-20
# Description: QAChunk
# -----------------------------------------------------------------------------
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Dict, Any, List


@dataclass(frozen=True)
class ChunkMetadata:
    record_id: int
    question: str
    source: str
    category: Optional[str] = None
    chunk_index: int = 0
    total_chunks: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.record_id,
            "question": self.question,
            "category": self.category,
            "source": self.source,
            "chunk_index": self.chunk_index,
            "total_chunks": self.total_chunks,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChunkMetadata":
        # Rows written by older loaders used camelCase keys
        return cls(
            record_id=int(data.get("id", data.get("record_id", 0))),
            question=str(data.get("question") or ""),
            source=str(data.get("source") or "Unknown"),
            category=data.get("category") or None,
            chunk_index=int(data.get("chunk_index", data.get("chunkIndex", 0))),
            total_chunks=int(data.get("total_chunks", data.get("totalChunks", 1))),
        )


@dataclass
class QAChunk:
    """
    Unit of retrieval: the text of (part of) one knowledge record, its embedding
    and the metadata needed to attribute it back to the record.

    `id` is assigned by the vector index on insert and is None before that.
    """

    text: str
    metadata: ChunkMetadata
    embedding: Optional[List[float]] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def record_id(self) -> int:
        return self.metadata.record_id

    def to_metadata(self) -> Dict[str, Any]:
        r"""
        Converts the chunk into the JSON metadata stored alongside the row.
        The embedding is omitted to reduce payload size.
        """
        return self.metadata.to_dict()
