"""Row selection and acknowledge eligibility for the alert tables."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel, Field

from src.core.types import (
    AcknowledgeResult,
    AlertRecord,
    AlertState,
    TriggerGroup,
    ViewMode,
    ViewModel,
)
from src.notify.formatters import format_acknowledge_failure
from src.views.exceptions import AcknowledgeNotAllowedError

if TYPE_CHECKING:
    from src.backend.client import AlertBackendClient
    from src.controller.controller import AlertQueryController
    from src.notify.dispatcher import NotificationDispatcher

logger = structlog.stdlib.get_logger()

Row = AlertRecord | TriggerGroup

_NOT_SELECTABLE_MESSAGES: dict[ViewMode, str] = {
    ViewMode.PER_ALERT: "Only active alerts can be acknowledged.",
    ViewMode.PER_TRIGGER: "Only triggers with active alerts can be acknowledged.",
}


class AcknowledgeRequest(BaseModel):
    """Alerts of one monitor/trigger pair to acknowledge together."""

    monitor_id: str
    trigger_id: str
    alert_ids: list[str] = Field(default_factory=list)


def is_selectable(row: Row) -> bool:
    """Whether a row may be selected for acknowledging."""
    if isinstance(row, TriggerGroup):
        return row.active_alert_count > 0
    return row.state == AlertState.ACTIVE


class SelectionCoordinator:
    """Tracks selected rows against the current ViewModel.

    Row identities are ``(id, version)`` keys, so every ViewModel
    replacement revalidates the selection: rows that were acknowledged
    come back with a new version and fall out of it.

    Usage::

        selection = SelectionCoordinator.for_controller(controller)
        selection.select([row.row_key])
        if selection.can_acknowledge:
            await selection.acknowledge()
    """

    def __init__(
        self,
        backend: AlertBackendClient | None = None,
        refresh: Callable[[], None] | None = None,
        notifier: NotificationDispatcher | None = None,
        view_model: ViewModel | None = None,
    ) -> None:
        self._backend = backend
        self._refresh = refresh
        self._notifier = notifier
        self._view_model = view_model or ViewModel()
        self._selected: list[str] = []

    @classmethod
    def for_controller(cls, controller: AlertQueryController) -> SelectionCoordinator:
        """Build a coordinator that follows *controller*'s view model."""
        coordinator = cls(
            backend=controller.context.backend,
            refresh=controller.refresh,
            notifier=controller.context.notifier,
            view_model=controller.view_model,
        )
        controller.on_view_model(coordinator.on_view_model)
        return coordinator

    # ── Properties ────────────────────────────────────────────────

    @property
    def view_mode(self) -> ViewMode:
        return self._view_model.view_mode

    @property
    def selected_keys(self) -> list[str]:
        return list(self._selected)

    @property
    def selected_rows(self) -> list[Row]:
        by_key = {row.row_key: row for row in self._view_model.rows}
        return [by_key[k] for k in self._selected if k in by_key]

    @property
    def can_acknowledge(self) -> bool:
        """Per-alert: any eligible row. Per-trigger: exactly one row."""
        rows = self.selected_rows
        if self.view_mode == ViewMode.PER_TRIGGER:
            return len(rows) == 1 and is_selectable(rows[0])
        return any(is_selectable(r) for r in rows)

    @property
    def can_view_details(self) -> bool:
        return self.view_mode == ViewMode.PER_TRIGGER and len(self._selected) == 1

    # ── Selection ────────────────────────────────────────────────

    def selectable_message(self, row: Row) -> str | None:
        """Tooltip for a row that cannot be selected, None otherwise."""
        if is_selectable(row):
            return None
        return _NOT_SELECTABLE_MESSAGES[self.view_mode]

    def select(self, keys: Iterable[str]) -> list[str]:
        """Replace the selection; unknown or ineligible keys are dropped."""
        by_key = {row.row_key: row for row in self._view_model.rows}
        selected: list[str] = []
        for key in dict.fromkeys(keys):
            row = by_key.get(key)
            if row is None or not is_selectable(row):
                logger.debug("selection_key_rejected", key=key)
                continue
            selected.append(key)
        self._selected = selected
        return self.selected_keys

    def clear(self) -> None:
        self._selected = []

    def on_view_model(self, view_model: ViewModel) -> None:
        """Revalidate the selection against a freshly fetched view model."""
        previous = self._selected
        self._view_model = view_model
        self.select(previous)
        dropped = len(previous) - len(self._selected)
        if dropped:
            logger.debug("selection_revalidated", dropped=dropped, kept=len(self._selected))

    # ── Acknowledge ──────────────────────────────────────────────

    def acknowledge_requests(self) -> list[AcknowledgeRequest]:
        """Group the selection into per-monitor/trigger acknowledge calls."""
        if not self.can_acknowledge:
            raise AcknowledgeNotAllowedError(
                f"Selection of {len(self._selected)} row(s) cannot be acknowledged "
                f"in {self.view_mode.value} view"
            )

        requests: dict[tuple[str, str], AcknowledgeRequest] = {}
        for row in self.selected_rows:
            key = (row.monitor_id, row.trigger_id)
            if isinstance(row, TriggerGroup):
                ids = list(row.active_alert_ids)
            else:
                ids = [row.id]
            req = requests.setdefault(
                key, AcknowledgeRequest(monitor_id=key[0], trigger_id=key[1]),
            )
            req.alert_ids.extend(ids)
        return list(requests.values())

    async def acknowledge(self) -> list[AcknowledgeResult]:
        """Acknowledge the selection, then clear it and refresh the table."""
        if self._backend is None:
            raise AcknowledgeNotAllowedError("No backend client configured")
        requests = self.acknowledge_requests()

        results: list[AcknowledgeResult] = []
        try:
            for req in requests:
                result = await self._backend.acknowledge_alerts(req.monitor_id, req.alert_ids)
                results.append(result)
                if result.failed and self._notifier is not None:
                    await self._notifier.notify(
                        format_acknowledge_failure(req.monitor_id, result.failed),
                    )
        finally:
            self.clear()
            if self._refresh is not None:
                self._refresh()
        return results
