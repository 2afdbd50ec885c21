"""Pure functions that turn backend failures into Notification objects."""

from __future__ import annotations

from src.backend.exceptions import (
    BackendApplicationError,
    BackendError,
    BackendParseError,
    BackendTransportError,
)
from src.notify.types import Notification, Severity

_FAILURE_KIND: dict[type[BackendError], str] = {
    BackendTransportError: "transport",
    BackendApplicationError: "application",
    BackendParseError: "parse",
}


def failure_kind(exc: BaseException) -> str:
    """Short label for the failure class of *exc*."""
    for cls, kind in _FAILURE_KIND.items():
        if isinstance(exc, cls):
            return kind
    return "unexpected"


def format_backend_error(
    resource: str,
    exc: BaseException,
    severity: Severity = Severity.ERROR,
) -> Notification:
    """Notification for a failed load of *resource* ("alerts", "monitors").

    Application failures carry the backend's message verbatim.
    """
    if isinstance(exc, BackendApplicationError):
        body = exc.message
    else:
        body = str(exc) or type(exc).__name__
    return Notification(
        severity=severity,
        title=f"There was a problem loading {resource}",
        body=body,
        source=f"{resource}_{failure_kind(exc)}",
    )


def format_acknowledge_failure(monitor_id: str, failed: list[str]) -> Notification:
    """Notification for alerts the backend refused to acknowledge."""
    return Notification(
        severity=Severity.WARNING,
        title="Some alerts could not be acknowledged",
        body=", ".join(failed),
        source=f"acknowledge_{monitor_id}",
    )
