# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-07
# Updated: 2026-01-26
# Description: main.py
# -----------------------------------------------------------------------------
from fastapi import FastAPI

from api.routers import admin, health, rag
from utility.logging_utils import get_logger

logger = get_logger("api")

app = FastAPI(title="CareRAG API")

app.include_router(health.router)
app.include_router(rag.router)
app.include_router(admin.router)

logger.info("CareRAG API routes registered")
