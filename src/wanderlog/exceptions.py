"""Custom exception hierarchy for wanderlog."""

from __future__ import annotations


class WanderError(Exception):
    """Base exception for all wanderlog errors."""


class WanderConfigError(WanderError):
    """Invalid or missing configuration."""


class WanderTransportError(WanderError):
    """HTTP-level failure (network, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class PersistenceWriteError(WanderError):
    """Local storage rejected a write (read-only, quota, sandboxed)."""

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)


class WanderStoreError(WanderError):
    """A record store operation failed.

    ``str(exc)`` is the user-displayable message; stores copy it into
    ``StoreState.error`` instead of letting the exception escape.
    """


class LoadFailedError(WanderStoreError):
    """The collection or a single record could not be loaded."""


class RecordNotFoundError(LoadFailedError):
    """The requested id is not in the collection.

    Reported to callers exactly like any other load failure.
    """

    def __init__(self, message: str, *, record_id: str = "") -> None:
        self.record_id = record_id
        super().__init__(message)


class CreateFailedError(WanderStoreError):
    """A record could not be created."""


class DeleteFailedError(WanderStoreError):
    """A record could not be deleted."""
