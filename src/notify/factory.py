"""Convenience factory for wiring the notification stack."""

from __future__ import annotations

from src.core.config import NotificationsConfig
from src.notify.channels import LogChannel, NotificationChannel, WebhookChannel
from src.notify.dispatcher import NotificationDispatcher


def create_notifier(
    config: NotificationsConfig,
    extra_channels: list[NotificationChannel] | None = None,
) -> NotificationDispatcher:
    """Build a dispatcher with the log channel plus any configured ones."""
    channels: list[NotificationChannel] = [LogChannel()]

    if config.webhook.enabled:
        channels.append(WebhookChannel(config.webhook))

    channels.extend(extra_channels or [])

    return NotificationDispatcher(
        channels=channels,
        throttle_secs=config.throttle_secs,
        history_size=config.history_size,
    )
