# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-20
# Updated: 2026-01-26
# Description: rag.py
# -----------------------------------------------------------------------------
from typing import List, Optional

from pydantic import BaseModel, Field


class RagSearchRequest(BaseModel):
    query: str = Field(..., min_length=1)


class SimilarRequest(BaseModel):
    query: str = Field(..., min_length=1)
    top_k: int = Field(5, ge=1, le=20)


class RagSource(BaseModel):
    chunk_id: Optional[int] = None
    record_id: Optional[int] = None
    question: str
    content: str
    score: float
    source: str
    category: Optional[str] = None


class RagSearchResponse(BaseModel):
    answer: str
    confidence: float
    sources: List[RagSource]
    total_sources: int


class SimilarResponse(BaseModel):
    query: str
    results: List[RagSource]
