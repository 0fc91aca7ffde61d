# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-06
# Updated: 2026-01-26
# Description: OpenAIHealth
# -----------------------------------------------------------------------------

import time
import logging
from typing import Optional

from chat.CompletionProvider import CompletionProvider
from utility.logging_utils import get_logger


class OpenAIHealth:
    """
    Smoke tests for completion provider connectivity, whole and streamed.
    """

    def __init__(self, completion: CompletionProvider, logger: Optional[logging.Logger] = None):
        self.completion = completion
        self.logger = logger or get_logger(__name__)
        self.logger.info("Configured completion provider: %s", type(completion).__name__)

    def run(self) -> bool:
        """
        Run a standard completion smoke test.
        """
        self.logger.info("Starting completion healthcheck")
        start = time.time()

        try:
            content = (self.completion.complete("Say OK if you can read this.") or "").strip()
            elapsed_ms = (time.time() - start) * 1000.0
            self.logger.info("Completion call succeeded in %.1f ms.", elapsed_ms)

            if not content:
                self.logger.error("Completion content is empty.")
                return False

            self.logger.info("Response content: %.80r", content)
            self.logger.info("Completion healthcheck PASSED.")
            return True

        except Exception as e:
            self.logger.exception("Completion healthcheck FAILED: %s", e)
            return False

    def run_stream(self, max_fragments: int = 5) -> bool:
        """
        Pull a few fragments from a streamed completion and close the stream early.
        """
        self.logger.info("Starting streamed completion healthcheck")
        stream = self.completion.complete_stream("Count from one to twenty in words.")
        received = 0
        try:
            for fragment in stream:
                if fragment:
                    received += 1
                if received >= max_fragments:
                    break
        except Exception as e:
            self.logger.exception("Streamed completion healthcheck FAILED: %s", e)
            return False
        finally:
            close = getattr(stream, "close", None)
            if close is not None:
                close()

        if received == 0:
            self.logger.error("Streamed completion produced no fragments.")
            return False
        self.logger.info("Streamed completion healthcheck PASSED (%d fragment(s)).", received)
        return True
