"""Exception hierarchy for the alerting backend client."""

from __future__ import annotations


class BackendError(Exception):
    """Base exception for all backend client errors."""


class BackendTransportError(BackendError):
    """Network failure or non-2xx HTTP status."""


class BackendApplicationError(BackendError):
    """Backend accepted the request but reported ``ok: false``."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BackendParseError(BackendError):
    """Response body was not JSON or had an unexpected shape."""
