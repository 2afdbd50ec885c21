"""QueryTranslator — maps a QueryState onto backend alert-search parameters."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from src.core.types import (
    AlertStateFilter,
    QueryState,
    SeverityFilter,
    SortDirection,
    SortField,
)

# Text fields sort on their non-analyzed sub-field.
_KEYWORD_SORT_FIELDS: frozenset[SortField] = frozenset({
    SortField.MONITOR_NAME,
    SortField.TRIGGER_NAME,
})


class BackendParams(BaseModel):
    """Translated alert-search request."""

    model_config = ConfigDict(frozen=True)

    start_index: int
    size: int
    sort_string: str
    sort_order: SortDirection
    missing: str | None = None
    severity_level: SeverityFilter = SeverityFilter.ALL
    alert_state: AlertStateFilter = AlertStateFilter.ALL
    search_string: str = ""
    monitor_id: str | None = None

    def to_query(self) -> dict[str, str | int]:
        """Render the backend's query-parameter names."""
        query: dict[str, str | int] = {
            "startIndex": self.start_index,
            "size": self.size,
            "sortString": self.sort_string,
            "sortOrder": self.sort_order.value,
            "severityLevel": self.severity_level.value,
            "alertState": self.alert_state.value,
            "searchString": self.search_string,
        }
        if self.missing is not None:
            query["missing"] = self.missing
        if self.monitor_id is not None:
            query["monitorId"] = self.monitor_id
        return query


def sort_key(field: SortField) -> str:
    """Backend sort key for a sort field."""
    if field in _KEYWORD_SORT_FIELDS:
        return f"{field.value}.keyword"
    return field.value


def missing_placement(field: SortField, direction: SortDirection) -> str | None:
    """Where documents lacking *field* sort, or None for the backend default.

    An open alert has no end time yet and sorts ahead of closed ones when
    descending. An unacknowledged alert is always last in acknowledgment
    order.
    """
    if field == SortField.END_TIME:
        return "_last" if direction == SortDirection.ASC else "_first"
    if field == SortField.ACKNOWLEDGED_TIME:
        return "_last"
    return None


def tokenize_search(search: str) -> str:
    """Turn free text into a multi-term wildcard query.

    ``"foo bar"`` becomes ``"*foo* *bar*"`` — independent terms, not a
    phrase. Blank input returns ``""`` (match all).
    """
    tokens = search.split()
    if not tokens:
        return ""
    return " ".join(f"*{token}*" for token in tokens)


def translate(state: QueryState) -> BackendParams:
    """Translate canonical query state into backend parameters."""
    # Only a single monitor id can be scoped by the backend contract.
    monitor_id = state.monitor_ids[0] if state.monitor_ids else None
    return BackendParams(
        start_index=state.from_index,
        size=state.size,
        sort_string=sort_key(state.sort_field),
        sort_order=state.sort_direction,
        missing=missing_placement(state.sort_field, state.sort_direction),
        severity_level=state.severity_level,
        alert_state=state.alert_state,
        search_string=tokenize_search(state.search),
        monitor_id=monitor_id,
    )
