"""Query-state transitions — a pure reducer over explicit events.

Presentation code never edits a QueryState; it emits one of the events
below and the controller applies it with :func:`apply`. Filter changes
always return to the first page.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from src.core.config import ViewsConfig, get_settings
from src.core.types import (
    AlertStateFilter,
    QueryState,
    SeverityFilter,
    SortDirection,
    SortField,
    ViewMode,
    page_to_from,
)
from src.query.url_sync import from_query_string


@dataclass(frozen=True)
class PageChanged:
    page: int


@dataclass(frozen=True)
class PageSizeChanged:
    size: int


@dataclass(frozen=True)
class SortChanged:
    field: SortField
    direction: SortDirection


@dataclass(frozen=True)
class TableChanged:
    """Combined page + sort change reported by a table widget."""

    page: int
    size: int
    sort_field: SortField
    sort_direction: SortDirection


@dataclass(frozen=True)
class SearchChanged:
    search: str


@dataclass(frozen=True)
class SeverityChanged:
    level: SeverityFilter


@dataclass(frozen=True)
class AlertStateChanged:
    state: AlertStateFilter


@dataclass(frozen=True)
class MonitorScopeChanged:
    monitor_ids: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ViewModeChanged:
    view_mode: ViewMode


@dataclass(frozen=True)
class LocationChanged:
    """Browser navigation landed on a new query string."""

    query_string: str


QueryEvent = (
    PageChanged
    | PageSizeChanged
    | SortChanged
    | TableChanged
    | SearchChanged
    | SeverityChanged
    | AlertStateChanged
    | MonitorScopeChanged
    | ViewModeChanged
    | LocationChanged
)


def apply(
    state: QueryState,
    event: QueryEvent,
    views: ViewsConfig | None = None,
) -> QueryState:
    """Return the state that results from applying *event* to *state*."""
    if isinstance(event, PageChanged):
        return state.model_copy(
            update={"from_index": page_to_from(event.page, state.size)},
        )

    if isinstance(event, PageSizeChanged):
        return _validated(state, from_index=0, size=event.size)

    if isinstance(event, SortChanged):
        return state.model_copy(update={
            "sort_field": event.field,
            "sort_direction": event.direction,
        })

    if isinstance(event, TableChanged):
        return _validated(
            state,
            from_index=page_to_from(event.page, event.size),
            size=event.size,
            sort_field=event.sort_field,
            sort_direction=event.sort_direction,
        )

    if isinstance(event, SearchChanged):
        return state.model_copy(update={"from_index": 0, "search": event.search})

    if isinstance(event, SeverityChanged):
        return state.model_copy(update={"from_index": 0, "severity_level": event.level})

    if isinstance(event, AlertStateChanged):
        return state.model_copy(update={"from_index": 0, "alert_state": event.state})

    if isinstance(event, MonitorScopeChanged):
        return _validated(state, from_index=0, monitor_ids=tuple(event.monitor_ids))

    if isinstance(event, ViewModeChanged):
        if event.view_mode == state.view_mode:
            return state
        defaults = (views or get_settings().views).defaults_for(event.view_mode)
        return state.model_copy(update={
            "from_index": 0,
            "size": defaults.size,
            "sort_field": defaults.sort_field,
            "sort_direction": defaults.sort_direction,
            "view_mode": event.view_mode,
        })

    if isinstance(event, LocationChanged):
        return from_query_string(event.query_string, views)

    raise TypeError(f"Unknown query event: {type(event).__name__}")


def _validated(state: QueryState, **update: object) -> QueryState:
    # model_copy skips validation; sizes and ids from widgets need checking.
    return QueryState.model_validate({**state.model_dump(), **update})
