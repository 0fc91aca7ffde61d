# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-21
# Updated: 2026-01-26
# Description: QAAdminService.py
# -----------------------------------------------------------------------------
from __future__ import annotations

import argparse
import json
import logging
from typing import Any, Dict, Iterable, Optional

import settings
from ingestion.QARecordLoader import QARecordLoader, RawSource
from knowledge.KnowledgeRecord import KnowledgeRecord
from services.QAAnswerService import QAAnswerService
from services.QAIngestService import IngestionReport, QAIngestService
from utility.errors import QAEmptyIndexError
from utility.logging_utils import get_class_logger
from vectorstore.QAVectorStore import IndexStats, QAVectorStore


class QAAdminService:
    """
    Maintenance operations on the knowledge index:
      - full reingestion from the configured CSV sources
      - index statistics
      - a self-test that answers a fixed sample question
      - single record update / delete
    """

    def __init__(
        self,
        *,
        store: QAVectorStore,
        ingest_service: QAIngestService,
        answer_service: QAAnswerService,
        data_dir: str = settings.DATA_DIR,
        logger: logging.Logger | None = None,
    ) -> None:
        self.store = store
        self.ingest_service = ingest_service
        self.answer_service = answer_service
        self.data_dir = data_dir
        self.logger = logger or get_class_logger(self.__class__)

    def reingest(self, sources: Optional[Iterable[RawSource]] = None) -> IngestionReport:
        source_list = list(sources) if sources is not None else QARecordLoader.default_sources(self.data_dir)
        self.logger.info("Reingest requested for %d source(s)", len(source_list))
        return self.ingest_service.rebuild(source_list)

    def stats(self) -> IndexStats:
        stats = self.store.stats()
        self.logger.info("Index stats: %s", stats.to_dict())
        return stats

    def self_test(self, query: Optional[str] = None) -> Dict[str, Any]:
        """
        Answer a sample question end to end. An empty index raises
        QAEmptyIndexError instead of producing a contextless answer.
        """
        stats = self.store.stats()
        if stats.total_chunks == 0:
            raise QAEmptyIndexError("Knowledge index is empty; run a reingest first")

        sample = (query or settings.SELF_TEST_QUERY).strip()
        self.logger.info("Self-test: chunks=%d query='%s'", stats.total_chunks, sample)
        response = self.answer_service.answer(sample)
        self.logger.info(
            "Self-test complete: sources=%d confidence=%.3f",
            len(response.sources),
            response.confidence,
        )
        return {
            "stats": stats,
            "sample_query": sample,
            "response": response,
        }

    def update_record(self, record: KnowledgeRecord) -> int:
        return self.ingest_service.update_record(record)

    def delete_record(self, record_id: int) -> int:
        removed = self.ingest_service.delete_record(record_id)
        self.logger.info("Deleted record %s (%d chunk(s))", record_id, removed)
        return removed

    def create_schema(self) -> None:
        create = getattr(self.store, "create_schema", None)
        if create is None:
            self.logger.info("%s has no schema to create", type(self.store).__name__)
            return
        create()


def main(argv: Optional[list] = None) -> int:
    from api.AppContainer import AppContainer

    parser = argparse.ArgumentParser(description="Caregiving knowledge index maintenance")
    parser.add_argument("command", choices=["reingest", "stats", "self-test", "init-db"])
    parser.add_argument("--query", default=None, help="Sample question for self-test")
    parser.add_argument("--data-dir", default=settings.DATA_DIR)
    args = parser.parse_args(argv)

    container = AppContainer()
    admin = container.admin_service
    admin.data_dir = args.data_dir

    if args.command == "init-db":
        admin.create_schema()
        print("Schema ready")
    elif args.command == "reingest":
        print(json.dumps(admin.reingest().to_dict(), indent=2))
    elif args.command == "stats":
        print(json.dumps(admin.stats().to_dict(), indent=2))
    else:
        out = admin.self_test(args.query)
        resp = out["response"]
        print(f"Query: {out['sample_query']}")
        print(f"Confidence: {resp.confidence:.3f} ({len(resp.sources)} sources)")
        print(resp.answer)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
