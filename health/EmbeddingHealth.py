# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-06
# Updated: 2026-01-26
# Description: EmbeddingHealth
# -----------------------------------------------------------------------------
import time
import logging
from typing import Optional

from embedding.EmbeddingProvider import EmbeddingProvider
from utility.logging_utils import get_logger


class EmbeddingHealth:
    """
    Smoke test for the embedding provider.

    Verifies:
      - The embedding call completes successfully
      - The response contains a valid vector
      - The vector dimension matches the expected dimension (if provided)
    """

    def __init__(
        self,
        embedder: EmbeddingProvider,
        expected_dim: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.embedder = embedder
        self.expected_dim = expected_dim
        self.logger = logger or get_logger(__name__)

        self.logger.info(
            "Initialising EmbeddingHealth (provider=%s, expected_dim=%s)",
            type(embedder).__name__,
            expected_dim,
        )

    def run(self) -> bool:
        """
        Run the embedding smoke test.

        Returns:
            True if the embedding call succeeds and (optionally) the dimension matches.
        """
        test_text = "Caregiving knowledge base embedding healthcheck"
        self.logger.info("Running embedding healthcheck")

        try:
            start = time.time()
            embedding = self.embedder.embed(test_text)
            elapsed_ms = (time.time() - start) * 1000.0

            if not embedding:
                self.logger.error("No embedding data returned.")
                return False

            dim = len(embedding)
            self.logger.info(
                "Embedding call succeeded in %.1f ms. Returned dimension: %d",
                elapsed_ms,
                dim,
            )

            if self.expected_dim is not None and dim != self.expected_dim:
                self.logger.warning(
                    "Dimension mismatch: expected %d, got %d.",
                    self.expected_dim,
                    dim,
                )
                return False

            self.logger.info("Embedding healthcheck PASSED.")
            return True

        except Exception as e:
            self.logger.exception("Embedding healthcheck FAILED: %s", e)
            return False
