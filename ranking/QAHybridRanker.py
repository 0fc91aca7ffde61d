# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-23
# Description: QAHybridRanker
# -----------------------------------------------------------------------------
import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence

import settings
from knowledge.RagTypes import SearchResult
from utility.errors import QAConfigurationError
from utility.logging_utils import get_class_logger
from vectorstore.QAVectorStore import QAVectorStore


@dataclass(frozen=True)
class RankWeights:
    vector: float = settings.VECTOR_WEIGHT
    lexical: float = settings.LEXICAL_WEIGHT

    def __post_init__(self) -> None:
        if self.vector < 0 or self.lexical < 0:
            raise ValueError(f"Rank weights must not be negative: {self}")


class QAHybridRanker:
    """
    Fuses the vector and lexical legs of the index into one ranking:

        combined = vector_score * w_vector + lexical_score * w_lexical

    A chunk found by only one leg gets 0 for the other term. Equal combined
    scores are ordered by ascending chunk id.
    """

    def __init__(
        self,
        store: QAVectorStore,
        *,
        weights: Optional[RankWeights] = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.store = store
        self.weights = weights or RankWeights()
        self.logger = logger or get_class_logger(self.__class__)

    def rank(
        self,
        query_text: str,
        query_vector: Sequence[float],
        top_k: int = settings.DEFAULT_TOP_K,
        *,
        similarity_floor: float = settings.ANSWER_SIMILARITY_FLOOR,
        weights: Optional[RankWeights] = None,
    ) -> List[SearchResult]:
        if len(query_vector) != self.store.dimension:
            raise QAConfigurationError(
                f"Query vector has dimension {len(query_vector)}, "
                f"index is configured for {self.store.dimension}"
            )
        if top_k <= 0:
            return []

        w = weights or self.weights
        vector_hits = self.store.vector_search(query_vector, top_k, similarity_floor)
        lexical_hits = self.store.lexical_search(query_text, top_k)

        fused = self.fuse(vector_hits, lexical_hits, w)[:top_k]
        self.logger.info(
            "rank: vector=%d lexical=%d fused=%d (top_k=%d)",
            len(vector_hits),
            len(lexical_hits),
            len(fused),
            top_k,
        )
        return fused

    @staticmethod
    def fuse(
        vector_hits: Sequence[SearchResult],
        lexical_hits: Sequence[SearchResult],
        weights: RankWeights,
    ) -> List[SearchResult]:
        combined: Dict[int, SearchResult] = {}
        scores: Dict[int, float] = {}

        for hit in vector_hits:
            combined[hit.chunk_id] = hit
            scores[hit.chunk_id] = scores.get(hit.chunk_id, 0.0) + hit.score * weights.vector

        for hit in lexical_hits:
            combined.setdefault(hit.chunk_id, hit)
            scores[hit.chunk_id] = scores.get(hit.chunk_id, 0.0) + hit.score * weights.lexical

        ordered = sorted(combined, key=lambda cid: (-scores[cid], cid))
        return [replace(combined[cid], score=scores[cid]) for cid in ordered]
