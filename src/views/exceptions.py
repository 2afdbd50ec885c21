"""Exceptions raised by the table view helpers."""

from __future__ import annotations


class SelectionError(Exception):
    """Base exception for selection / acknowledge errors."""


class AcknowledgeNotAllowedError(SelectionError):
    """The current selection does not permit acknowledging."""
