"""Async HTTP client for the alerting backend — alert search and monitor lookup."""

from __future__ import annotations

from collections.abc import Iterable
from types import TracebackType
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from src.backend.exceptions import (
    BackendApplicationError,
    BackendParseError,
    BackendTransportError,
)
from src.core.config import BackendConfig, get_settings
from src.core.types import AcknowledgeResult, AlertPage, AlertRecord, MonitorSummary
from src.query.translator import BackendParams

logger = structlog.stdlib.get_logger()


def _parse_alert(raw: dict[str, Any]) -> AlertRecord:
    """Convert a backend alert document to an AlertRecord.

    The backend names identity fields ``alert_id`` / ``alert_version``;
    proxied responses may already carry ``id`` / ``version``.
    """
    return AlertRecord(
        id=str(raw.get("alert_id") or raw.get("id") or ""),
        version=str(raw.get("alert_version", raw.get("version", ""))),
        monitor_id=raw.get("monitor_id") or "",
        monitor_name=raw.get("monitor_name") or "",
        trigger_id=raw.get("trigger_id") or "",
        trigger_name=raw.get("trigger_name") or "",
        severity=str(raw.get("severity") or ""),
        state=raw.get("state") or "ACTIVE",
        start_time=raw.get("start_time") or 0,
        end_time=raw.get("end_time"),
        acknowledged_time=raw.get("acknowledged_time"),
        error_message=raw.get("error_message") or "",
        raw=raw,
    )


def _parse_monitor_hit(raw: dict[str, Any]) -> MonitorSummary:
    return MonitorSummary(
        id=str(raw.get("_id") or raw.get("id") or ""),
        source=raw.get("_source") or {},
    )


def _check_ok(body: Any) -> dict[str, Any]:
    """Validate the response envelope, raising on ``ok: false``."""
    if not isinstance(body, dict):
        raise BackendParseError(f"Expected JSON object, got {type(body).__name__}")
    if body.get("ok") is False:
        raise BackendApplicationError(str(body.get("err") or "Unknown backend error"))
    return body


class AlertBackendClient:
    """Thin async client over the alerting REST API.

    No business logic lives here: callers pass already-translated
    parameters and get typed records back.

    Usage::

        async with AlertBackendClient() as client:
            page = await client.fetch_alerts(translate(state))
    """

    def __init__(self, config: BackendConfig | None = None) -> None:
        self._config = config or get_settings().backend
        self._http: httpx.AsyncClient | None = None

    @property
    def connected(self) -> bool:
        """Whether the HTTP client is active."""
        return self._http is not None and not self._http.is_closed

    async def connect(self) -> None:
        """Create the httpx async client."""
        headers: dict[str, str] = {"Accept": "application/json"}
        token = self._config.scoping_token.get_secret_value()
        if token:
            headers[self._config.scoping_header] = token
        self._http = httpx.AsyncClient(
            base_url=self._config.base_url,
            headers=headers,
            timeout=httpx.Timeout(self._config.timeout_secs),
        )
        logger.info("backend_client_connected", base_url=self._config.base_url)

    async def close(self) -> None:
        """Close the httpx async client."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> AlertBackendClient:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    # ── Reads ────────────────────────────────────────────────────

    async def fetch_alerts(self, params: BackendParams) -> AlertPage:
        """Run one alert search."""
        body = await self._request("GET", self._config.alerts_path, params=params.to_query())

        raw_alerts = body.get("alerts")
        if not isinstance(raw_alerts, list):
            raise BackendParseError("Alert response missing 'alerts' list")
        try:
            alerts = [_parse_alert(a) for a in raw_alerts if isinstance(a, dict)]
        except ValidationError as exc:
            raise BackendParseError(f"Malformed alert document: {exc}") from exc

        raw_total = body.get("totalAlerts", len(alerts))
        try:
            total = int(raw_total)
        except (TypeError, ValueError) as exc:
            raise BackendParseError(f"Invalid totalAlerts: {raw_total!r}") from exc
        logger.debug("alerts_received", count=len(alerts), total=total)
        return AlertPage(alerts=alerts, total_count=total)

    async def fetch_monitors_by_ids(self, ids: Iterable[str]) -> list[MonitorSummary]:
        """Batch-look-up monitors by id.

        Ids that no longer exist are simply absent from the result.
        """
        unique_ids = list(dict.fromkeys(i for i in ids if i))
        if not unique_ids:
            return []

        payload = {"query": {"ids": {"values": unique_ids}}}
        body = await self._request("POST", self._config.monitors_search_path, json=payload)

        # Proxied responses nest the search result under "resp".
        result = body.get("resp", body)
        outer = result.get("hits") if isinstance(result, dict) else None
        hits = outer.get("hits") if isinstance(outer, dict) else None
        if not isinstance(hits, list):
            raise BackendParseError("Monitor search response missing 'hits.hits'")

        monitors = [_parse_monitor_hit(h) for h in hits if isinstance(h, dict)]
        if len(monitors) < len(unique_ids):
            logger.info(
                "monitors_partially_found",
                requested=len(unique_ids),
                found=len(monitors),
            )
        return monitors

    # ── Writes ───────────────────────────────────────────────────

    async def acknowledge_alerts(
        self, monitor_id: str, alert_ids: list[str],
    ) -> AcknowledgeResult:
        """Acknowledge alerts belonging to one monitor."""
        path = self._config.acknowledge_path.format(monitor_id=monitor_id)
        body = await self._request("POST", path, json={"alerts": alert_ids})

        result = body.get("resp", body)
        if not isinstance(result, dict):
            raise BackendParseError("Acknowledge response is not an object")
        acknowledged = [str(a) for a in result.get("success") or []]
        failed = [
            str(f.get("id", f)) if isinstance(f, dict) else str(f)
            for f in result.get("failed") or []
        ]
        logger.info(
            "alerts_acknowledged",
            monitor_id=monitor_id,
            acknowledged=len(acknowledged),
            failed=len(failed),
        )
        return AcknowledgeResult(acknowledged=acknowledged, failed=failed)

    # ── Internal ─────────────────────────────────────────────────

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        if self._http is None:
            raise BackendTransportError("HTTP client not connected")

        try:
            if method == "GET":
                response = await self._http.get(path, **kwargs)
            else:
                response = await self._http.post(path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise BackendTransportError(
                f"Backend returned {exc.response.status_code} for {path}"
            ) from exc
        except httpx.HTTPError as exc:
            raise BackendTransportError(f"Backend request failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise BackendParseError(f"Backend returned invalid JSON for {path}") from exc

        return _check_ok(body)
