# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-20
# Description: errors.py
# -----------------------------------------------------------------------------


class QAConfigurationError(RuntimeError):
    """Deployment is not usable: missing schema, credentials or a dimension mismatch."""


class QAProviderError(RuntimeError):
    """An embedding or completion call to the model provider failed."""

    def __init__(self, message: str, *, provider: str = "openai", operation: str = "") -> None:
        super().__init__(message)
        self.provider = provider
        self.operation = operation


class QAEmptyIndexError(RuntimeError):
    """The knowledge index holds no chunks, so there is nothing to validate against."""
