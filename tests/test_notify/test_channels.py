"""Tests for notification channels — webhook HTTP mocking and the log channel."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

from pydantic import SecretStr

from src.core.config import WebhookConfig
from src.notify.channels import LogChannel, WebhookChannel
from src.notify.types import Notification, Severity


# ── Helpers ─────────────────────────────────────────────────────


def _note(**kw: object) -> Notification:
    defaults: dict[str, object] = {
        "severity": Severity.ERROR,
        "title": "There was a problem loading alerts",
        "body": "index_not_found_exception",
        "source": "alerts_application",
        "timestamp": 1000.0,
    }
    defaults.update(kw)
    return Notification(**defaults)  # type: ignore[arg-type]


def _webhook_config() -> WebhookConfig:
    return WebhookConfig(enabled=True, url=SecretStr("https://hooks.test/alerts"))


def _mock_response(status: int = 200, text: str = "ok") -> AsyncMock:
    resp = AsyncMock()
    resp.status = status
    resp.text = AsyncMock(return_value=text)
    resp.__aenter__ = AsyncMock(return_value=resp)
    resp.__aexit__ = AsyncMock(return_value=False)
    return resp


def _channel_with_session(resp: AsyncMock | None = None, **post_kw: object) -> tuple[WebhookChannel, MagicMock]:
    ch = WebhookChannel(_webhook_config())
    mock_session = MagicMock()
    if resp is not None:
        mock_session.post = MagicMock(return_value=resp)
    else:
        mock_session.post = MagicMock(**post_kw)
    mock_session.closed = False
    ch._session = mock_session
    return ch, mock_session


# ── WebhookChannel ──────────────────────────────────────────────


class TestWebhookChannel:
    async def test_send_success(self) -> None:
        ch, session = _channel_with_session(_mock_response(200))
        assert await ch.send(_note()) is True

        call_args = session.post.call_args
        assert call_args[0][0] == "https://hooks.test/alerts"
        payload = call_args[1]["json"]
        assert payload == {
            "severity": "ERROR",
            "title": "There was a problem loading alerts",
            "body": "index_not_found_exception",
            "source": "alerts_application",
            "timestamp": 1000.0,
        }

    async def test_no_content_is_success(self) -> None:
        ch, _ = _channel_with_session(_mock_response(204))
        assert await ch.send(_note()) is True

    async def test_send_failure_status(self) -> None:
        ch, _ = _channel_with_session(_mock_response(500, "server error"))
        assert await ch.send(_note()) is False

    async def test_send_exception(self) -> None:
        ch, _ = _channel_with_session(side_effect=ConnectionError("timeout"))
        assert await ch.send(_note()) is False

    async def test_close_session(self) -> None:
        ch = WebhookChannel(_webhook_config())
        mock_session = AsyncMock()
        mock_session.closed = False
        ch._session = mock_session

        await ch.close()
        mock_session.close.assert_awaited_once()
        assert ch._session is None

    async def test_close_when_no_session(self) -> None:
        ch = WebhookChannel(_webhook_config())
        await ch.close()

    async def test_lazy_session_creation(self) -> None:
        ch = WebhookChannel(_webhook_config())
        assert ch._session is None
        assert ch._get_session() is not None
        await ch.close()


# ── LogChannel ──────────────────────────────────────────────────


class TestLogChannel:
    async def test_send_always_succeeds(self) -> None:
        ch = LogChannel()
        assert await ch.send(_note()) is True
        assert await ch.send(_note(severity=Severity.INFO)) is True

    async def test_close_is_noop(self) -> None:
        await LogChannel().close()
