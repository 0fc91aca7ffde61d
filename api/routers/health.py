# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-07
# Description: health.py
# -----------------------------------------------------------------------------
import logging
from fastapi import APIRouter, Depends, HTTPException, Query

from api.schemas.health import HealthResponse, DeepHealthResponse
from api.dependencies import get_health_service
from services.QAHealthService import QAHealthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/", response_model=HealthResponse)
async def health_check():
    return HealthResponse(status="ok", message="CareRAG API running")


@router.get("/deep", response_model=DeepHealthResponse)
def deep_health_check(
    svc: QAHealthService = Depends(get_health_service),
    run_stream: bool = Query(False, description="Also run the streamed completion test"),
) -> DeepHealthResponse:
    logger.info("GET /health/deep called (run_stream=%s)", run_stream)
    try:
        result = svc.deep_health(run_stream=run_stream)
    except Exception as e:
        logger.error("GET /health/deep failed: %s", e)
        raise HTTPException(status_code=500, detail=f"Deep health failed: {e}")

    logger.info("GET /health/deep completed (status=%s)", result.status)
    return result
