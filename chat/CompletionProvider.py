# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-21
# Description: CompletionProvider
# -----------------------------------------------------------------------------

from typing import Iterator, Protocol, runtime_checkable


@runtime_checkable
class CompletionProvider(Protocol):
    def complete(self, prompt: str) -> str:
        ...

    def complete_stream(self, prompt: str) -> Iterator[str]:
        """Yields text fragments; closing the iterator stops the upstream request."""
        ...
