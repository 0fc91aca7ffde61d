# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-07
# Updated: 2026-01-26
# Description: dependencies.py
# -----------------------------------------------------------------------------
from functools import lru_cache

from api.AppContainer import AppContainer
from config.Config import Config
from services.QAAdminService import QAAdminService
from services.QAAnswerService import QAAnswerService
from services.QAHealthService import QAHealthService
from services.QAQueryService import QAQueryService


@lru_cache
def get_cfg() -> Config:
    return Config.from_env()


@lru_cache
def get_container() -> AppContainer:
    # built on first request, not at import
    return AppContainer(cfg=get_cfg())


def get_health_service() -> QAHealthService:
    return get_container().health_service


def get_query_service() -> QAQueryService:
    return get_container().query_service


def get_answer_service() -> QAAnswerService:
    return get_container().answer_service


def get_admin_service() -> QAAdminService:
    return get_container().admin_service
