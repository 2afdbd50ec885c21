"""Query state, URL sync and backend translation."""

from src.query.state import (
    AlertStateChanged,
    LocationChanged,
    MonitorScopeChanged,
    PageChanged,
    PageSizeChanged,
    QueryEvent,
    SearchChanged,
    SeverityChanged,
    SortChanged,
    TableChanged,
    ViewModeChanged,
    apply,
)
from src.query.translator import BackendParams, translate
from src.query.url_sync import from_query_string, to_query_string

__all__ = [
    "AlertStateChanged",
    "BackendParams",
    "LocationChanged",
    "MonitorScopeChanged",
    "PageChanged",
    "PageSizeChanged",
    "QueryEvent",
    "SearchChanged",
    "SeverityChanged",
    "SortChanged",
    "TableChanged",
    "ViewModeChanged",
    "apply",
    "from_query_string",
    "to_query_string",
    "translate",
]
