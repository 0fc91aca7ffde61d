# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-07
# Updated: 2026-01-26
# Description: TestRunner
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

from chat.CompletionProvider import CompletionProvider
from embedding.EmbeddingProvider import EmbeddingProvider
from utility.logging_utils import get_class_logger
from vectorstore.QAVectorStore import QAVectorStore

from health.EmbeddingHealth import EmbeddingHealth
from health.IndexHealth import IndexHealth
from health.OpenAIHealth import OpenAIHealth


class TestRunner:
    """
    Orchestrates all smoke tests and reports a consolidated result.

    Tests included:
      - IndexHealth     (vector index reachable, schema matches, lexical query runs)
      - EmbeddingHealth (embedding provider, dimension check)
      - OpenAIHealth    (completion provider; streamed variant optional)
    """

    __test__ = False  # not a pytest test class

    def __init__(
        self,
        *,
        store: QAVectorStore,
        embedder: EmbeddingProvider,
        completion: CompletionProvider,
        logger: Optional[logging.Logger] = None,
    ):
        self.logger = logger or get_class_logger(self.__class__)
        self.logger.info("Initialising SmokeTestRunner")

        self.index_health = IndexHealth(store)
        self.embedding_health = EmbeddingHealth(embedder, expected_dim=store.dimension)
        self.openai_health = OpenAIHealth(completion)

    # -------------------------------------------------------------------------
    def run_all(self, run_stream: bool = False) -> Dict[str, bool]:
        """
        Run all configured smoke tests.

        :param run_stream: If True, also runs the streamed completion test.
        :return: Dict mapping test names to True/False.
        """
        self.logger.info("Starting smoke test suite (run_stream=%s)", run_stream)

        checks: Dict[str, Callable[[], bool]] = {
            "index_health": self.index_health.run,
            "lexical_health": self.index_health.run_lexical,
            "embedding_health": self.embedding_health.run,
            "openai_health": self.openai_health.run,
        }
        if run_stream:
            checks["openai_stream_health"] = self.openai_health.run_stream

        results: Dict[str, bool] = {}
        for name, check in checks.items():
            try:
                self.logger.info("Running %s", name)
                ok = bool(check())
            except Exception as e:
                self.logger.exception("%s raised an exception: %s", name, e)
                ok = False
            results[name] = ok
            self._log_result(name, ok)

        self._log_summary(results)
        return results

    # -------------------------------------------------------------------------
    def _log_result(self, name: str, ok: bool) -> None:
        if ok:
            self.logger.info("%s: PASS", name)
        else:
            self.logger.error("%s: FAIL", name)

    def _log_summary(self, results: Dict[str, bool]) -> None:
        total = len(results)
        passed = sum(1 for v in results.values() if v)
        failed = total - passed

        self.logger.info("Smoke test summary: %d total, %d passed, %d failed", total, passed, failed)

        for name, ok in results.items():
            status = "PASS" if ok else "FAIL"
            self.logger.info("  %s: %s", name, status)


if __name__ == "__main__":
    from api.AppContainer import AppContainer

    container = AppContainer()
    results = container.test_runner.run_all(run_stream=True)

    print("\n=== Smoke Test Results ===")
    for name, ok in results.items():
        print(f"{name}: {'PASS' if ok else 'FAIL'}")

    overall_ok = all(results.values())
    print(f"\nOverall smoke test result: {'PASS' if overall_ok else 'FAIL'}")
