"""Custom exception hierarchy for vinsync."""

from __future__ import annotations


class VinSyncError(Exception):
    """Base exception for all vinsync errors."""


class VinSyncConfigError(VinSyncError):
    """Invalid or missing configuration.

    Fatal to a run: raised before any issue is processed.
    """


class VinSyncTransportError(VinSyncError):
    """HTTP-level failure (network, unexpected status, invalid JSON)."""

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


class SourceUnavailableError(VinSyncTransportError):
    """A telemetry lookup failed or timed out.

    The sync driver degrades the affected source to "absent" for that VIN
    and keeps going.
    """


class UpdateRejectedError(VinSyncTransportError):
    """The issue tracker refused a partial update."""


class PreflightError(VinSyncError):
    """A pre-flight capability check failed (auth, permissions, field ids)."""

    def __init__(self, message: str, *, failures: tuple[str, ...] = ()) -> None:
        self.failures = failures
        super().__init__(message)
