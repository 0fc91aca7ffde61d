# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-20
# Updated: 2026-01-26
# Description: AppContainer.py
# -----------------------------------------------------------------------------
from typing import Optional

import settings
from chat.OpenAIChat import OpenAIChat
from chunking.QAChunker import QAChunker
from config.Config import Config
from embedding.QAEmbedder import QAEmbedder
from health.TestRunner import TestRunner
from ingestion.QANormalizer import QANormalizer
from ingestion.QARecordLoader import QARecordLoader
from ranking.QAHybridRanker import QAHybridRanker, RankWeights
from services.QAAdminService import QAAdminService
from services.QAAnswerService import QAAnswerService
from services.QAHealthService import QAHealthService
from services.QAIngestService import QAIngestService
from services.QAQueryService import QAQueryService
from utility.logging_utils import get_class_logger
from vectorstore.MemoryQAVectorStore import MemoryQAVectorStore
from vectorstore.PgQAVectorStore import PgQAVectorStore
from vectorstore.QAVectorStore import QAVectorStore


class AppContainer:
    """
    Owns heavy object instantiation and application wiring.
    Singleton instances are provided via FastAPI dependencies.
    """

    def __init__(self, cfg: Optional[Config] = None) -> None:
        self.logger = get_class_logger(self.__class__)

        # Configuration
        self.cfg = cfg or Config.from_env()
        self.logger.info("Building container: %s", self.cfg.summary())

        # Core infrastructure
        self.embedder = QAEmbedder(cfg=self.cfg)
        self.store = self.build_store(self.cfg)
        self.openai_chat = OpenAIChat(cfg=self.cfg)

        # Smoke tests / health
        self.test_runner = TestRunner(
            store=self.store,
            embedder=self.embedder,
            completion=self.openai_chat,
        )
        self.health_service = QAHealthService(test_runner=self.test_runner)

        # Ingestion pipeline
        self.ingest_service = QAIngestService(
            store=self.store,
            embedder=self.embedder,
            loader=QARecordLoader(),
            normalizer=QANormalizer(),
            chunker=QAChunker(),
        )

        # Query + answer
        self.ranker = QAHybridRanker(
            store=self.store,
            weights=RankWeights(vector=settings.VECTOR_WEIGHT, lexical=settings.LEXICAL_WEIGHT),
        )
        self.query_service = QAQueryService(embedder=self.embedder, ranker=self.ranker)
        self.answer_service = QAAnswerService(
            query_service=self.query_service,
            completion=self.openai_chat,
        )

        # Maintenance
        self.admin_service = QAAdminService(
            store=self.store,
            ingest_service=self.ingest_service,
            answer_service=self.answer_service,
        )

    @staticmethod
    def build_store(cfg: Config) -> QAVectorStore:
        if cfg.vector_backend == "memory":
            return MemoryQAVectorStore(embedding_dim=settings.EMBEDDING_DIM)
        return PgQAVectorStore(database_url=cfg.database_url)
