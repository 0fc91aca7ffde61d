# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-20
# Updated: 2026-01-24
# Description: QAQueryService
# -----------------------------------------------------------------------------
import logging
from dataclasses import dataclass
from typing import Any, List

import settings
from embedding.EmbeddingProvider import EmbeddingProvider
from knowledge.RagTypes import SearchResult
from ranking.QAHybridRanker import QAHybridRanker
from utility.logging_utils import get_class_logger, preview


@dataclass
class QAQueryService:
    """Embed a question, then hybrid-rank it against the knowledge index."""

    embedder: EmbeddingProvider
    ranker: QAHybridRanker
    logger: logging.Logger | None = None

    def __post_init__(self) -> None:
        self.logger = self.logger or get_class_logger(self.__class__)

    def retrieve(
        self,
        query_text: str,
        top_k: int = settings.DEFAULT_TOP_K,
        similarity_floor: float = settings.ANSWER_SIMILARITY_FLOOR,
    ) -> List[SearchResult]:
        q = (query_text or "").strip()
        if not q:
            raise ValueError("query_text must not be empty")

        self.logger.info("retrieve: query='%s' top_k=%d floor=%.2f", preview(q), top_k, similarity_floor)
        query_vector = self.embedder.embed(q)
        return self.ranker.rank(q, query_vector, top_k, similarity_floor=similarity_floor)

    def search_similar(self, query_text: str, top_k: int = settings.DEFAULT_TOP_K) -> List[SearchResult]:
        """Ranked sources without an answer; uses the looser search floor."""
        return self.retrieve(query_text, top_k=top_k, similarity_floor=settings.SEARCH_SIMILARITY_FLOOR)

    @staticmethod
    def to_hits(results: List[SearchResult], *, preview_chars: int | None = None) -> List[dict[str, Any]]:
        return [r.to_dict(preview_chars=preview_chars) for r in results]
