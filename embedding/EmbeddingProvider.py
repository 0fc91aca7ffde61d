# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-21
# Description: EmbeddingProvider
# -----------------------------------------------------------------------------

from typing import List, Protocol, Sequence, runtime_checkable


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Turns text into fixed-length float vectors."""

    @property
    def dimension(self) -> int:
        ...

    def embed(self, text: str) -> List[float]:
        ...

    def embed_batch(self, texts: Sequence[str]) -> List[List[float]]:
        """Order-preserving; raises for the whole batch if any item fails."""
        ...
