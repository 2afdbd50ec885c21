"""Shared fixtures for controller tests."""

from __future__ import annotations

import asyncio

import pytest


class FakeClock:
    """Virtual time for debounce windows.

    ``sleep`` parks the caller until :meth:`advance` moves the clock past
    its deadline. ``settle`` lets every ready task run to its next await.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._sleepers: list[tuple[float, asyncio.Future[None]]] = []

    async def sleep(self, delay: float) -> None:
        fut: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._sleepers.append((self.now + delay, fut))
        await fut

    async def settle(self) -> None:
        for _ in range(20):
            await asyncio.sleep(0)

    async def advance(self, secs: float) -> None:
        await self.settle()
        target = self.now + secs
        while True:
            due = [d for d, _ in self._sleepers if d <= target + 1e-9]
            if not due:
                break
            self.now = max(self.now, min(due))
            ready = [(d, f) for d, f in self._sleepers if d <= self.now + 1e-9]
            self._sleepers = [(d, f) for d, f in self._sleepers if d > self.now + 1e-9]
            for _, fut in ready:
                if not fut.done():
                    fut.set_result(None)
            await self.settle()
        self.now = target
        await self.settle()

    async def advance_to(self, when: float) -> None:
        await self.advance(when - self.now)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
