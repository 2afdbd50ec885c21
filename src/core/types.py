"""Domain types for the alert query and view layer."""

from __future__ import annotations

import math
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Upper bound on how many alerts a table can page through.
MAX_ALERT_COUNT = 10000


class SortField(StrEnum):
    """Sortable alert columns."""

    MONITOR_NAME = "monitor_name"
    TRIGGER_NAME = "trigger_name"
    START_TIME = "start_time"
    END_TIME = "end_time"
    ACKNOWLEDGED_TIME = "acknowledged_time"
    SEVERITY = "severity"
    STATE = "state"


class SortDirection(StrEnum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


class SeverityFilter(StrEnum):
    """Severity filter — ALL or a single trigger severity level."""

    ALL = "ALL"
    HIGHEST = "1"
    HIGH = "2"
    MEDIUM = "3"
    LOW = "4"
    LOWEST = "5"


class AlertState(StrEnum):
    """Lifecycle state of an alert as reported by the backend."""

    ACTIVE = "ACTIVE"
    ACKNOWLEDGED = "ACKNOWLEDGED"
    COMPLETED = "COMPLETED"  # resolved
    ERROR = "ERROR"
    DELETED = "DELETED"


class AlertStateFilter(StrEnum):
    """Alert state filter — ALL or a single state."""

    ALL = "ALL"
    ACTIVE = "ACTIVE"
    ACKNOWLEDGED = "ACKNOWLEDGED"
    COMPLETED = "COMPLETED"
    ERROR = "ERROR"
    DELETED = "DELETED"


class ViewMode(StrEnum):
    """Table presentation mode."""

    PER_ALERT = "per_alert"
    PER_TRIGGER = "per_trigger"


# ── Query State ──────────────────────────────────────────────────


class QueryState(BaseModel):
    """Canonical filter / sort / pagination state.

    Immutable; every change goes through ``src.query.state.apply``.
    """

    model_config = ConfigDict(frozen=True)

    from_index: int = Field(default=0, ge=0)
    size: int = Field(default=20, gt=0)
    search: str = ""
    sort_field: SortField = SortField.START_TIME
    sort_direction: SortDirection = SortDirection.DESC
    severity_level: SeverityFilter = SeverityFilter.ALL
    alert_state: AlertStateFilter = AlertStateFilter.ALL
    monitor_ids: tuple[str, ...] = ()
    view_mode: ViewMode = ViewMode.PER_ALERT

    @field_validator("monitor_ids")
    @classmethod
    def _check_monitor_ids(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        # URL parsing splits on commas and drops blanks.
        for monitor_id in value:
            if not monitor_id or "," in monitor_id:
                raise ValueError(f"Invalid monitor id: {monitor_id!r}")
        return value

    @property
    def page(self) -> int:
        return self.from_index // self.size


def page_to_from(page: int, size: int) -> int:
    """Convert a zero-based page index to a result offset."""
    if page < 0 or size <= 0:
        raise ValueError(f"invalid page/size: {page}/{size}")
    return page * size


def from_to_page(from_index: int, size: int) -> int:
    """Convert a result offset to the zero-based page it falls on."""
    if from_index < 0 or size <= 0:
        raise ValueError(f"invalid from/size: {from_index}/{size}")
    return from_index // size


# ── Backend Records ──────────────────────────────────────────────


class AlertRecord(BaseModel):
    """A single alert document.

    Selection identity is ``(id, version)``: acknowledging an alert keeps
    its id but bumps the version.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    version: str
    monitor_id: str = ""
    monitor_name: str = ""
    trigger_id: str = ""
    trigger_name: str = ""
    severity: str = ""
    state: AlertState = AlertState.ACTIVE
    start_time: int = 0
    end_time: int | None = None
    acknowledged_time: int | None = None
    error_message: str = ""
    raw: dict[str, Any] = Field(default_factory=dict)

    @property
    def row_key(self) -> str:
        return f"{self.id}-{self.version}"


class TriggerGroup(BaseModel):
    """Per-trigger aggregate of the alerts in one result page."""

    model_config = ConfigDict(frozen=True)

    trigger_id: str
    monitor_id: str
    trigger_name: str
    total_alert_count: int
    active_alert_count: int
    state_counts: dict[AlertState, int] = Field(default_factory=dict)
    active_alert_ids: tuple[str, ...] = ()
    latest_alert: AlertRecord

    @property
    def row_key(self) -> str:
        return f"{self.trigger_id}-{self.latest_alert.version}"


class MonitorSummary(BaseModel):
    """Monitor document returned by the batch id lookup."""

    model_config = ConfigDict(frozen=True)

    id: str
    source: dict[str, Any] = Field(default_factory=dict)

    @property
    def name(self) -> str:
        return str(self.source.get("name") or "")


class AlertPage(BaseModel):
    """One page of alerts plus the backend's total hit count."""

    alerts: list[AlertRecord] = Field(default_factory=list)
    total_count: int = 0


class AcknowledgeResult(BaseModel):
    """Outcome of an acknowledge call."""

    acknowledged: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed


# ── View Model ───────────────────────────────────────────────────


class ViewModel(BaseModel):
    """Read-only product of one fetch cycle."""

    model_config = ConfigDict(frozen=True)

    rows: list[AlertRecord] | list[TriggerGroup] = Field(default_factory=list)
    total_count: int = 0
    monitors: dict[str, MonitorSummary] = Field(default_factory=dict)
    view_mode: ViewMode = ViewMode.PER_ALERT
    query: QueryState = QueryState()

    def monitor_name(self, monitor_id: str) -> str:
        """Name of a referenced monitor, blank when it was not found."""
        monitor = self.monitors.get(monitor_id)
        return monitor.name if monitor is not None else ""

    @property
    def pagination_total(self) -> int:
        return min(MAX_ALERT_COUNT, self.total_count)

    @property
    def page_count(self) -> int:
        return math.ceil(self.total_count / self.query.size) or 1

    def row_keys(self) -> list[str]:
        return [row.row_key for row in self.rows]
