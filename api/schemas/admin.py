# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-21
# Updated: 2026-01-26
# Description: admin.py
# -----------------------------------------------------------------------------
from typing import Optional

from pydantic import BaseModel, Field

from api.schemas.rag import RagSearchResponse


class IndexStatsResponse(BaseModel):
    total_chunks: int
    total_records: int
    avg_chunks_per_record: float


class IngestionReportResponse(BaseModel):
    loaded: int
    skipped_duplicate: int
    skipped_invalid: int
    skipped_error: int
    chunks_stored: int
    rebuilt: bool


class SelfTestRequest(BaseModel):
    query: Optional[str] = None


class SelfTestResponse(BaseModel):
    stats: IndexStatsResponse
    sample_query: str
    response: RagSearchResponse


class RecordUpdateRequest(BaseModel):
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
    source: str = "Unknown"
    category: Optional[str] = None


class RecordMutationResponse(BaseModel):
    record_id: int
    chunks: int
