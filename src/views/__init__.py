"""Table views — trigger aggregation and row selection."""

from src.views.exceptions import AcknowledgeNotAllowedError, SelectionError
from src.views.grouper import group_by_trigger, referenced_monitor_ids
from src.views.selection import AcknowledgeRequest, SelectionCoordinator, is_selectable

__all__ = [
    "AcknowledgeNotAllowedError",
    "AcknowledgeRequest",
    "SelectionCoordinator",
    "SelectionError",
    "group_by_trigger",
    "is_selectable",
    "referenced_monitor_ids",
]
