"""Alert query controller — state ownership, debounce and fetch cycles."""

from src.controller.context import ControllerContext, LocationHistory, MemoryHistory
from src.controller.controller import AlertQueryController, ControllerPhase
from src.controller.debounce import DebounceWindow

__all__ = [
    "AlertQueryController",
    "ControllerContext",
    "ControllerPhase",
    "DebounceWindow",
    "LocationHistory",
    "MemoryHistory",
]
