"""Fixed-window debounce for fetch requests."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import structlog

logger = structlog.stdlib.get_logger()

SleepFn = Callable[[float], Awaitable[None]]


class DebounceWindow:
    """Rate-limits *fire* to one call per quiet window.

    With ``leading_edge`` the first request after a quiet period fires at
    once and opens a window of ``window_secs``; requests inside the window
    are absorbed and do not extend it. When the window closes, a trailing
    fire happens only if a forced request was absorbed, or if
    *trailing_check* is set and returns True. A trailing fire opens a new
    window.

    Without ``leading_edge`` the first request only opens the window and
    *fire* runs once when it closes.

    *fire* must read whatever live state it needs when called; nothing is
    captured at request time.
    """

    def __init__(
        self,
        fire: Callable[[], None],
        window_secs: float = 0.5,
        leading_edge: bool = True,
        trailing_check: Callable[[], bool] | None = None,
        on_close: Callable[[], None] | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._fire = fire
        self._window_secs = window_secs
        self._leading_edge = leading_edge
        self._trailing_check = trailing_check
        self._on_close = on_close
        self._sleep = sleep
        self._task: asyncio.Task[None] | None = None
        self._absorbed = 0
        self._forced = False

    @property
    def open(self) -> bool:
        """Whether a window is currently running."""
        return self._task is not None

    @property
    def absorbed(self) -> int:
        return self._absorbed

    def request(self, force: bool = False) -> bool:
        """Ask for a fire. Returns True if it fired immediately.

        Must be called from inside a running event loop.
        """
        if self._task is not None:
            self._absorbed += 1
            self._forced = self._forced or force
            return False

        self._open()
        if self._leading_edge:
            self._fire()
            return True
        return False

    async def cancel(self) -> None:
        """Close any open window without firing."""
        task, self._task = self._task, None
        self._absorbed = 0
        self._forced = False
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    def _open(self) -> None:
        self._task = asyncio.create_task(self._run())

    async def _run(self) -> None:
        await self._sleep(self._window_secs)

        self._task = None
        absorbed, forced = self._absorbed, self._forced
        self._absorbed = 0
        self._forced = False

        if not self._leading_edge:
            self._fire()
        elif forced or (
            absorbed and self._trailing_check is not None and self._trailing_check()
        ):
            logger.debug("debounce_trailing_fire", absorbed=absorbed, forced=forced)
            self._open()
            self._fire()

        if self._on_close is not None:
            self._on_close()
