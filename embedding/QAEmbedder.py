# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-14
# Updated: 2026-01-21
# Description: QAEmbedder
# -----------------------------------------------------------------------------
import time
from typing import List, Optional, Sequence

import numpy as np
from openai import OpenAI

import settings
from config.Config import Config
from utility.errors import QAConfigurationError, QAProviderError
from utility.logging_utils import get_class_logger


class QAEmbedder:
    """
    OpenAI embeddings behind the EmbeddingProvider interface.

    Vectors are L2-normalised so inner product and cosine agree. Nothing is
    cached here. Failed calls raise QAProviderError; they are retried only
    when max_attempts > 1.
    """

    def __init__(
            self,
            cfg: Config,
            *,
            dimension: int | None = None,
            batch_size: int | None = None,
            max_attempts: int | None = None,
            normalize: bool = settings.EMBED_NORMALIZE,
            client: Optional[OpenAI] = None,
            logger=None,
    ):
        self.cfg = cfg
        self._dimension = dimension or settings.EMBEDDING_DIM
        self.batch_size = batch_size or settings.EMBED_BATCH_SIZE
        self.max_attempts = max_attempts or settings.EMBED_MAX_ATTEMPTS
        self.normalize = normalize
        self.logger = logger or get_class_logger(self.__class__)

        if client is None and not cfg.openai_api_key:
            raise QAConfigurationError("OPENAI_API_KEY is required for embeddings")

        self.client = client or OpenAI(
            api_key=cfg.openai_api_key,
            base_url=cfg.openai_base_url or None,
        )
        self.model = cfg.openai_embed_model or "text-embedding-3-small"
        self.logger.info(
            "OpenAI Embedder initialised (model=%s, dim=%d, batch=%d)",
            self.model,
            self._dimension,
            self.batch_size,
        )

    @property
    def dimension(self) -> int:
        return self._dimension

    def embed(self, text: str) -> List[float]:
        return self.embed_batch([text])[0]

    def embed_batch(self, texts: Sequence[str]) -> List[List[float]]:
        """
        Embed texts in provider-sized batches. Any failed batch fails the call.
        """
        texts = list(texts)
        if not texts:
            return []
        if any(not (t or "").strip() for t in texts):
            raise ValueError("Cannot embed empty text")

        out: List[List[float]] = []
        for i in range(0, len(texts), self.batch_size):
            arr = self._embed_batch(texts[i:i + self.batch_size])
            out.extend(arr.tolist())
        return out

    def _embed_batch(self, texts: List[str]) -> np.ndarray:
        delay = 0.8
        for attempt in range(1, self.max_attempts + 1):
            try:
                resp = self.client.embeddings.create(
                    model=self.model,
                    input=texts,
                    dimensions=self._dimension,
                )
                # the API does not promise response order; index does
                data = sorted(resp.data, key=lambda d: d.index)
                arr = np.asarray([d.embedding for d in data], dtype=np.float32)
                break
            except Exception as e:
                self.logger.warning(
                    "Embedding batch of %d failed (attempt %d/%d): %s",
                    len(texts), attempt, self.max_attempts, e,
                )
                if attempt == self.max_attempts:
                    raise QAProviderError(
                        f"Embedding request failed: {e}", operation="embed"
                    ) from e
                time.sleep(delay)
                delay *= 1.7  # backoff

        if arr.shape != (len(texts), self._dimension):
            raise QAConfigurationError(
                f"Embedding model '{self.model}' returned shape {arr.shape}, "
                f"expected ({len(texts)}, {self._dimension})"
            )

        # Normalize vectors (cosine-friendly)
        if self.normalize:
            norms = np.linalg.norm(arr, axis=1, keepdims=True) + 1e-12
            arr = arr / norms
        return arr
