"""User-facing notifications (error toasts and their delivery channels)."""

from src.notify.channels import LogChannel, NotificationChannel, WebhookChannel
from src.notify.dispatcher import NotificationDispatcher
from src.notify.factory import create_notifier
from src.notify.formatters import format_acknowledge_failure, format_backend_error
from src.notify.types import Notification, Severity

__all__ = [
    "LogChannel",
    "Notification",
    "NotificationChannel",
    "NotificationDispatcher",
    "Severity",
    "WebhookChannel",
    "create_notifier",
    "format_acknowledge_failure",
    "format_backend_error",
]
