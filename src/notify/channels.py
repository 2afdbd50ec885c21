"""Notification channels — structured log and JSON webhook delivery."""

from __future__ import annotations

import abc

import aiohttp
import structlog

from src.core.config import WebhookConfig
from src.notify.types import Notification, Severity

logger = structlog.get_logger(__name__)


class NotificationChannel(abc.ABC):
    """Base class for notification delivery channels."""

    @abc.abstractmethod
    async def send(self, note: Notification) -> bool:
        """Deliver a notification. Returns True on success."""

    @abc.abstractmethod
    async def close(self) -> None:
        """Release resources (HTTP sessions, etc.)."""


class LogChannel(NotificationChannel):
    """Writes notifications to the structured log."""

    async def send(self, note: Notification) -> bool:
        if note.severity >= Severity.CRITICAL:
            log = logger.error
        elif note.severity >= Severity.WARNING:
            log = logger.warning
        else:
            log = logger.info
        log(
            "notification",
            severity=note.severity.name,
            title=note.title,
            body=note.body,
            source=note.source,
        )
        return True

    async def close(self) -> None:
        return None


class WebhookChannel(NotificationChannel):
    """POSTs notifications as JSON to a configured webhook URL."""

    def __init__(self, config: WebhookConfig) -> None:
        self._url = config.url.get_secret_value()
        self._session: aiohttp.ClientSession | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def send(self, note: Notification) -> bool:
        payload = {
            "severity": note.severity.name,
            "title": note.title,
            "body": note.body,
            "source": note.source,
            "timestamp": note.timestamp,
        }

        try:
            session = self._get_session()
            async with session.post(self._url, json=payload) as resp:
                if resp.status in (200, 201, 202, 204):
                    return True
                body = await resp.text()
                logger.warning(
                    "webhook_send_failed",
                    status=resp.status,
                    body=body[:200],
                )
                return False
        except Exception:
            logger.exception("webhook_send_error")
            return False

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
