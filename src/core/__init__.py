"""Core module — config, types, logging."""

from src.core.config import Settings, get_settings, load_settings, reset_settings
from src.core.logging import setup_logging
from src.core.types import (
    AlertPage,
    AlertRecord,
    AlertState,
    AlertStateFilter,
    MonitorSummary,
    QueryState,
    SeverityFilter,
    SortDirection,
    SortField,
    TriggerGroup,
    ViewMode,
    ViewModel,
)

__all__ = [
    "AlertPage",
    "AlertRecord",
    "AlertState",
    "AlertStateFilter",
    "MonitorSummary",
    "QueryState",
    "Settings",
    "SeverityFilter",
    "SortDirection",
    "SortField",
    "TriggerGroup",
    "ViewMode",
    "ViewModel",
    "get_settings",
    "load_settings",
    "reset_settings",
    "setup_logging",
]
