# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-20
# Description: RagTypes
# -----------------------------------------------------------------------------
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Union

from chunking.QAChunk import QAChunk


@dataclass(frozen=True)
class SearchResult:
    """A chunk with its relevance score for one query. Never persisted."""

    chunk: QAChunk
    score: float
    source: str

    @property
    def chunk_id(self) -> int:
        return self.chunk.id if self.chunk.id is not None else -1

    def to_dict(self, *, preview_chars: int | None = None) -> Dict[str, Any]:
        text = self.chunk.text
        if preview_chars is not None and len(text) > preview_chars:
            text = text[:preview_chars] + "..."
        return {
            "chunk_id": self.chunk.id,
            "record_id": self.chunk.record_id,
            "question": self.chunk.metadata.question,
            "category": self.chunk.metadata.category,
            "content": text,
            "score": self.score,
            "source": self.source,
        }


@dataclass(frozen=True)
class RagResponse:
    answer: str
    sources: List[SearchResult]
    confidence: float
    query: str


# ---- Streaming events -------------------------------------------------------

@dataclass(frozen=True)
class MetadataEvent:
    confidence: float
    sources: List[SearchResult] = field(default_factory=list)
    type: Literal["metadata"] = "metadata"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "confidence": self.confidence,
            "sources": [s.to_dict(preview_chars=200) for s in self.sources],
        }


@dataclass(frozen=True)
class ContentEvent:
    content: str
    type: Literal["content"] = "content"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "content": self.content}


@dataclass(frozen=True)
class ErrorEvent:
    message: str
    type: Literal["error"] = "error"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "message": self.message}


StreamEvent = Union[MetadataEvent, ContentEvent, ErrorEvent]
