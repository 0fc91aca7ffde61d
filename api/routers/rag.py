# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-28
# Updated: 2026-01-26
# Description: rag.py
# -----------------------------------------------------------------------------
import json
import logging
import threading
from typing import AsyncIterator

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse
from starlette.concurrency import iterate_in_threadpool

from api.dependencies import get_answer_service, get_query_service
from api.schemas.rag import (
    RagSearchRequest,
    RagSearchResponse,
    RagSource,
    SimilarRequest,
    SimilarResponse,
)
from services.QAAnswerService import QAAnswerService
from services.QAQueryService import QAQueryService
from utility.errors import QAProviderError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rag", tags=["rag"])

SOURCE_PREVIEW_CHARS = 200
END_FRAME = {"type": "end"}


def _frame(payload: dict) -> str:
    return f"data: {json.dumps(payload)}\n\n"


def _require_query(raw: str) -> str:
    q = (raw or "").strip()
    if not q:
        raise HTTPException(status_code=400, detail="query must not be empty")
    return q


@router.post("/search", response_model=RagSearchResponse)
def post_search(
    req: RagSearchRequest,
    svc: QAAnswerService = Depends(get_answer_service),
) -> RagSearchResponse:
    query = _require_query(req.query)
    logger.info("POST /rag/search (start) query_len=%d", len(query))

    try:
        resp = svc.answer(query)
    except QAProviderError as e:
        logger.exception("post_search provider failure: %s", e)
        raise HTTPException(status_code=502, detail="Failed to process RAG query")
    except Exception as e:
        logger.exception("post_search failed: %s", e)
        raise HTTPException(status_code=500, detail="Failed to process RAG query")

    sources = [RagSource(**s.to_dict(preview_chars=SOURCE_PREVIEW_CHARS)) for s in resp.sources]
    logger.info("POST /rag/search (done) sources=%d confidence=%.3f", len(sources), resp.confidence)

    return RagSearchResponse(
        answer=resp.answer,
        confidence=resp.confidence,
        sources=sources,
        total_sources=len(sources),
    )


@router.post("/search/stream")
async def post_search_stream(
    req: RagSearchRequest,
    request: Request,
    svc: QAAnswerService = Depends(get_answer_service),
) -> StreamingResponse:
    query = _require_query(req.query)
    logger.info("POST /rag/search/stream (start) query_len=%d", len(query))

    stop = threading.Event()

    async def frames() -> AsyncIterator[str]:
        events = svc.answer_stream(query, should_stop=stop.is_set)
        try:
            async for event in iterate_in_threadpool(events):
                if await request.is_disconnected():
                    logger.info("POST /rag/search/stream client disconnected")
                    stop.set()
                    events.close()
                    return
                yield _frame(event.to_dict())
            yield _frame(END_FRAME)
        finally:
            stop.set()

    return StreamingResponse(
        frames(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )


@router.post("/similar", response_model=SimilarResponse)
def post_similar(
    req: SimilarRequest,
    svc: QAQueryService = Depends(get_query_service),
) -> SimilarResponse:
    query = _require_query(req.query)

    try:
        results = svc.search_similar(query, top_k=req.top_k)
    except QAProviderError as e:
        logger.exception("post_similar provider failure: %s", e)
        raise HTTPException(status_code=502, detail="Failed to search knowledge base")
    except Exception as e:
        logger.exception("post_similar failed: %s", e)
        raise HTTPException(status_code=500, detail="Failed to search knowledge base")

    hits = [RagSource(**h) for h in svc.to_hits(results, preview_chars=SOURCE_PREVIEW_CHARS)]
    return SimilarResponse(query=query, results=hits)
