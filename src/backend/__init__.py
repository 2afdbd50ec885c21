"""Alerting backend client."""

from src.backend.client import AlertBackendClient
from src.backend.exceptions import (
    BackendApplicationError,
    BackendError,
    BackendParseError,
    BackendTransportError,
)

__all__ = [
    "AlertBackendClient",
    "BackendApplicationError",
    "BackendError",
    "BackendParseError",
    "BackendTransportError",
]
