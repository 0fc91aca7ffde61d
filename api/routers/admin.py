# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-21
# Updated: 2026-01-26
# Description: admin.py
# -----------------------------------------------------------------------------
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_admin_service
from api.schemas.admin import (
    IndexStatsResponse,
    IngestionReportResponse,
    RecordMutationResponse,
    RecordUpdateRequest,
    SelfTestRequest,
    SelfTestResponse,
)
from api.schemas.rag import RagSearchResponse, RagSource
from knowledge.KnowledgeRecord import KnowledgeRecord
from services.QAAdminService import QAAdminService
from utility.errors import QAEmptyIndexError, QAProviderError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/rag", tags=["admin"])


@router.post("/reingest", response_model=IngestionReportResponse)
def post_reingest(svc: QAAdminService = Depends(get_admin_service)) -> IngestionReportResponse:
    logger.info("POST /admin/rag/reingest")
    try:
        report = svc.reingest()
    except FileNotFoundError as e:
        logger.error("Reingest source missing: %s", e)
        raise HTTPException(status_code=404, detail=str(e))
    except QAProviderError as e:
        logger.error("Reingest aborted, index left as it was: %s", e)
        raise HTTPException(status_code=502, detail=f"Reingest failed: {e}")
    except Exception as e:
        logger.exception("Reingest failed: %s", e)
        raise HTTPException(status_code=500, detail=f"Reingest failed: {e}")
    return IngestionReportResponse(**report.to_dict())


@router.get("/stats", response_model=IndexStatsResponse)
def get_stats(svc: QAAdminService = Depends(get_admin_service)) -> IndexStatsResponse:
    try:
        return IndexStatsResponse(**svc.stats().to_dict())
    except Exception as e:
        logger.exception("Stats failed: %s", e)
        raise HTTPException(status_code=500, detail=f"Failed to get stats: {e}")


@router.post("/test", response_model=SelfTestResponse)
def post_self_test(
    req: Optional[SelfTestRequest] = None,
    svc: QAAdminService = Depends(get_admin_service),
) -> SelfTestResponse:
    try:
        out = svc.self_test(req.query if req else None)
    except QAEmptyIndexError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.exception("Self-test failed: %s", e)
        raise HTTPException(status_code=500, detail=f"Self-test failed: {e}")

    resp = out["response"]
    sources = [RagSource(**s.to_dict(preview_chars=200)) for s in resp.sources]
    return SelfTestResponse(
        stats=IndexStatsResponse(**out["stats"].to_dict()),
        sample_query=out["sample_query"],
        response=RagSearchResponse(
            answer=resp.answer,
            confidence=resp.confidence,
            sources=sources,
            total_sources=len(sources),
        ),
    )


@router.put("/records/{record_id}", response_model=RecordMutationResponse)
def put_record(
    record_id: int,
    req: RecordUpdateRequest,
    svc: QAAdminService = Depends(get_admin_service),
) -> RecordMutationResponse:
    record = KnowledgeRecord(
        id=record_id,
        question=req.question,
        answer=req.answer,
        source=req.source,
        category=req.category,
    )
    try:
        stored = svc.update_record(record)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Record update failed: %s", e)
        raise HTTPException(status_code=500, detail=f"Record update failed: {e}")
    return RecordMutationResponse(record_id=record_id, chunks=stored)


@router.delete("/records/{record_id}", response_model=RecordMutationResponse)
def delete_record(
    record_id: int,
    svc: QAAdminService = Depends(get_admin_service),
) -> RecordMutationResponse:
    removed = svc.delete_record(record_id)
    if removed == 0:
        raise HTTPException(status_code=404, detail=f"record {record_id} not indexed")
    return RecordMutationResponse(record_id=record_id, chunks=removed)
