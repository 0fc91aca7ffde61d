# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-06
# Updated: 2026-01-26
# Description: IndexHealth
# -----------------------------------------------------------------------------
import logging
import time
from typing import Optional

from utility.logging_utils import get_logger
from vectorstore.QAVectorStore import QAVectorStore


class IndexHealth:
    """
    Healthcheck for the knowledge index.
    - run(): verify the backend is reachable and its schema matches
    - run_lexical(): issue a full-text query against the index
    """

    def __init__(self, store: QAVectorStore, logger: Optional[logging.Logger] = None):
        self.store = store
        self.logger = logger or get_logger(__name__)
        self.logger.info("Initialising IndexHealth for %s", type(store).__name__)

    def run(self) -> bool:
        self.logger.info("Running index healthcheck")
        try:
            start = time.time()
            if not self.store.test_connection():
                self.logger.error("Index healthcheck FAILED: backend unreachable.")
                return False
            self.store.initialize()
            stats = self.store.stats()
            elapsed_ms = (time.time() - start) * 1000.0
            self.logger.info("Index reachable in %.1f ms: %s", elapsed_ms, stats.to_dict())
            if stats.total_chunks == 0:
                self.logger.warning("Index is reachable but empty.")
            self.logger.info("Index healthcheck PASSED.")
            return True
        except Exception as e:
            self.logger.exception("Index healthcheck FAILED: %s", e)
            return False

    def run_lexical(self, query_text: str = "caregiver") -> bool:
        try:
            hits = self.store.lexical_search(query_text, top_k=1)
            self.logger.info("Lexical probe '%s' returned %d hit(s).", query_text, len(hits))
            return True
        except Exception as e:
            self.logger.exception("Lexical probe FAILED: %s", e)
            return False
