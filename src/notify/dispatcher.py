"""Notification dispatcher — fans notifications out to channels with throttling."""

from __future__ import annotations

import time
from collections import deque

import structlog

from src.notify.channels import NotificationChannel
from src.notify.types import Notification, Severity

logger = structlog.get_logger(__name__)


class NotificationDispatcher:
    """Routes notifications to channels.

    - DEBUG notifications are log-only — never sent to channels.
    - Repeats of the same (source, body) inside *throttle_secs* are
      dropped, so a failing backend does not flood the operator with one
      toast per refresh.
    - CRITICAL notifications bypass the throttle.
    - The last *history_size* dispatched notifications stay readable via
      :attr:`recent` for the presentation layer.
    """

    def __init__(
        self,
        channels: list[NotificationChannel] | None = None,
        throttle_secs: float = 5.0,
        history_size: int = 50,
    ) -> None:
        self._channels: list[NotificationChannel] = channels or []
        self._throttle_secs = throttle_secs
        self._history: deque[Notification] = deque(maxlen=history_size)
        self._last_sent: dict[tuple[str, str], float] = {}

    @property
    def recent(self) -> list[Notification]:
        """Most recent dispatched notifications, oldest first."""
        return list(self._history)

    async def notify(self, note: Notification) -> bool:
        """Dispatch a notification. Returns False when suppressed."""
        if note.severity == Severity.DEBUG:
            logger.debug("notification_debug", title=note.title, body=note.body)
            return False

        now = time.monotonic()
        self._prune(now)
        if note.severity < Severity.CRITICAL:
            key = (note.source, note.body)
            if key in self._last_sent:
                logger.debug("notification_throttled", source=note.source)
                return False
            self._last_sent[key] = now

        self._history.append(note)
        await self._dispatch_to_channels(note)
        return True

    def _prune(self, now: float) -> None:
        """Forget throttle keys whose window has passed."""
        expired = [
            key for key, sent in self._last_sent.items()
            if now - sent >= self._throttle_secs
        ]
        for key in expired:
            del self._last_sent[key]

    async def _dispatch_to_channels(self, note: Notification) -> None:
        for ch in self._channels:
            try:
                await ch.send(note)
            except Exception:
                logger.exception(
                    "channel_dispatch_error",
                    channel=type(ch).__name__,
                    title=note.title,
                )

    # ── Lifecycle ───────────────────────────────────────────────

    async def close(self) -> None:
        for ch in self._channels:
            try:
                await ch.close()
            except Exception:
                logger.exception("channel_close_error", channel=type(ch).__name__)
