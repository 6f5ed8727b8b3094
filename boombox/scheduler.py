"""
Scheduler - Event loop timers used by fades and engine callbacks.

Everything in the mixer runs on one event loop thread. The scheduler
is the only way the core defers work: fade ticks are re-armed with
call_later(), and engines that call back from another thread hand the
callback over with call_soon_threadsafe().

Implementations:
    AsyncioScheduler  - real time, backed by an asyncio event loop
    ManualScheduler   - virtual time for tests (boombox.testing)
"""

from __future__ import annotations

import asyncio
from typing import Callable, Protocol, runtime_checkable


@runtime_checkable
class TimerHandle(Protocol):
    """A pending callback that can be cancelled."""

    def cancel(self) -> None:
        ...

    def cancelled(self) -> bool:
        ...


@runtime_checkable
class Scheduler(Protocol):
    """Protocol for the event loop the mixer runs on."""

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        """Run callback once after delay_ms milliseconds."""
        ...

    def call_soon(self, callback: Callable[[], None]) -> TimerHandle:
        """Run callback on the next loop iteration."""
        ...

    def call_soon_threadsafe(self, callback: Callable[[], None]) -> None:
        """Hand a callback to the loop from any thread."""
        ...


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop.

    Example:
        async def main():
            boombox = BoomBox(engine, scheduler=AsyncioScheduler())
            ...

    When no loop is given, the running loop is used (so construct it
    from inside a coroutine), falling back to a fresh loop otherwise.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = asyncio.new_event_loop()
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self._loop.call_later(max(delay_ms, 0) / 1000, callback)

    def call_soon(self, callback: Callable[[], None]) -> asyncio.Handle:
        return self._loop.call_soon(callback)

    def call_soon_threadsafe(self, callback: Callable[[], None]) -> None:
        self._loop.call_soon_threadsafe(callback)
