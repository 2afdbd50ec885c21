"""Domain types for user-facing notifications."""

from __future__ import annotations

import time
from enum import IntEnum

from pydantic import BaseModel, Field


class Severity(IntEnum):
    """Notification severity — ordered so comparisons work naturally."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3
    CRITICAL = 4


class Notification(BaseModel):
    """A message for the operator's notification (toast) area."""

    severity: Severity
    title: str
    body: str = ""
    source: str = ""
    timestamp: float = Field(default_factory=time.time)
