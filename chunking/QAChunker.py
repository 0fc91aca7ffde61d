# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-11
# Updated: 2026-01-21
# Description: QAChunker
# -----------------------------------------------------------------------------
import logging
from typing import Iterable, List, Optional

from chunking.QAChunk import ChunkMetadata, QAChunk
from knowledge.KnowledgeRecord import KnowledgeRecord
from utility.logging_utils import get_class_logger


class QAChunker:
    """
    Projects KnowledgeRecords into QAChunks.

    With max_chunk_chars=None (the deployed policy) every record becomes one
    chunk holding the full question + answer. A positive limit splits the
    combined text at word boundaries; chunk_index/total_chunks are filled in
    either way so stored rows look the same.
    """

    def __init__(self, *, max_chunk_chars: Optional[int] = None, logger: logging.Logger | None = None):
        if max_chunk_chars is not None and max_chunk_chars <= 0:
            raise ValueError(f"max_chunk_chars must be positive, got {max_chunk_chars}")
        self.max_chunk_chars = max_chunk_chars
        self.logger = logger or get_class_logger(self.__class__)

    def chunk_record(self, record: KnowledgeRecord) -> List[QAChunk]:
        texts = self._split(record.combined_text())
        total = len(texts)
        return [
            QAChunk(
                text=text,
                metadata=ChunkMetadata(
                    record_id=record.id,
                    question=record.question,
                    source=record.source,
                    category=record.category,
                    chunk_index=i,
                    total_chunks=total,
                ),
            )
            for i, text in enumerate(texts)
        ]

    def chunk_records(self, records: Iterable[KnowledgeRecord]) -> List[QAChunk]:
        chunks: List[QAChunk] = []
        n_records = 0
        for record in records:
            chunks.extend(self.chunk_record(record))
            n_records += 1
        self.logger.debug("Chunked %d record(s) into %d chunk(s)", n_records, len(chunks))
        return chunks

    def _split(self, text: str) -> List[str]:
        limit = self.max_chunk_chars
        if limit is None or len(text) <= limit:
            return [text]

        pieces: List[str] = []
        current: List[str] = []
        current_len = 0
        for word in text.split(" "):
            extra = len(word) + (1 if current else 0)
            if current and current_len + extra > limit:
                pieces.append(" ".join(current))
                current, current_len = [], 0
                extra = len(word)
            # a single word longer than the limit is cut by characters
            while len(word) > limit:
                pieces.append(word[:limit])
                word = word[limit:]
                extra = len(word)
            current.append(word)
            current_len += extra
        if current:
            pieces.append(" ".join(current))
        return [p for p in pieces if p.strip()]
