"""URLQuerySync — QueryState <-> shareable URL query string.

Every field of the canonical state is written, so a link (or a
back/forward navigation) always restores exactly the state that produced
it. Absent or unparseable keys fall back to the view-mode defaults.

Monitor ids are written as repeated ``monitorIds`` keys. Comma-separated
values are also accepted when reading; ids never contain commas.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TypeVar
from urllib.parse import parse_qsl, urlencode

import structlog

from src.core.config import ViewsConfig, get_settings
from src.core.types import (
    AlertStateFilter,
    QueryState,
    SeverityFilter,
    SortDirection,
    SortField,
    ViewMode,
)

logger = structlog.stdlib.get_logger()

_E = TypeVar("_E", bound=StrEnum)


def to_query_string(state: QueryState) -> str:
    """Serialize every QueryState field into a URL query string."""
    pairs: list[tuple[str, str]] = [
        ("from", str(state.from_index)),
        ("size", str(state.size)),
        ("search", state.search),
        ("sortField", state.sort_field.value),
        ("sortDirection", state.sort_direction.value),
        ("severityLevel", state.severity_level.value),
        ("alertState", state.alert_state.value),
    ]
    pairs.extend(("monitorIds", monitor_id) for monitor_id in state.monitor_ids)
    pairs.append(("viewMode", state.view_mode.value))
    return urlencode(pairs)


def from_query_string(query: str, views: ViewsConfig | None = None) -> QueryState:
    """Parse a URL query string, applying defaults for absent keys."""
    cfg = views or get_settings().views
    values: dict[str, list[str]] = {}
    for key, value in parse_qsl(query.lstrip("?"), keep_blank_values=True):
        values.setdefault(key, []).append(value)

    def first(key: str) -> str | None:
        found = values.get(key)
        return found[0] if found else None

    view_mode = _parse_enum(ViewMode, first("viewMode"), cfg.default_view_mode)
    defaults = cfg.defaults_for(view_mode)

    size = _parse_int(first("size"), defaults.size, minimum=1)
    return QueryState(
        from_index=_parse_int(first("from"), 0, minimum=0),
        size=size,
        search=first("search") or "",
        sort_field=_parse_enum(SortField, first("sortField"), defaults.sort_field),
        sort_direction=_parse_enum(
            SortDirection, first("sortDirection"), defaults.sort_direction,
        ),
        severity_level=_parse_enum(
            SeverityFilter, first("severityLevel"), SeverityFilter.ALL,
        ),
        alert_state=_parse_enum(
            AlertStateFilter, first("alertState"), AlertStateFilter.ALL,
        ),
        monitor_ids=_parse_monitor_ids(values.get("monitorIds", [])),
        view_mode=view_mode,
    )


def _parse_int(raw: str | None, default: int, minimum: int) -> int:
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.debug("url_param_invalid_int", value=raw)
        return default
    return value if value >= minimum else default


def _parse_enum(enum_cls: type[_E], raw: str | None, default: _E) -> _E:
    if raw is None:
        return default
    try:
        return enum_cls(raw)
    except ValueError:
        logger.debug("url_param_invalid_enum", enum=enum_cls.__name__, value=raw)
        return default


def _parse_monitor_ids(raw_values: list[str]) -> tuple[str, ...]:
    return tuple(
        monitor_id
        for value in raw_values
        for monitor_id in value.split(",")
        if monitor_id
    )
