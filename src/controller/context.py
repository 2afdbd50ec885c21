"""Collaborators handed to the controller explicitly at construction."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Protocol

from src.backend.client import AlertBackendClient
from src.controller.debounce import SleepFn
from src.core.config import ViewsConfig
from src.notify.dispatcher import NotificationDispatcher


class LocationHistory(Protocol):
    """Where the shareable query string is written (browser history, etc.)."""

    def replace(self, query_string: str) -> None: ...


class MemoryHistory:
    """In-process location history holding a single current entry."""

    def __init__(self, initial: str = "") -> None:
        self.current = initial
        self.replace_count = 0

    def replace(self, query_string: str) -> None:
        self.current = query_string
        self.replace_count += 1


@dataclass
class ControllerContext:
    """Everything the controller talks to, passed in rather than looked up."""

    backend: AlertBackendClient
    notifier: NotificationDispatcher
    history: LocationHistory = field(default_factory=MemoryHistory)
    views: ViewsConfig | None = None
    sleep: SleepFn = asyncio.sleep
