"""
Shared fixtures: a BoomBox on a recording engine and a virtual clock.

Provides:
    - ManualScheduler / MockEngine / MemoryStore instances
    - A ready BoomBox and a not-yet-ready one
    - A settings store that always fails
"""

from __future__ import annotations

import pytest

from boombox import BoomBox, BoomBoxConfig, MemoryStore
from boombox.testing import ManualScheduler, MockEngine


class FailingStore:
    """SettingsStore whose every read and write fails."""

    def __init__(self) -> None:
        self.writes = 0

    def get(self, key: str) -> str | None:
        raise OSError("storage unavailable")

    def set(self, key: str, value: str) -> None:
        self.writes += 1
        raise OSError("storage unavailable")


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def engine() -> MockEngine:
    return MockEngine()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def failing_store() -> FailingStore:
    return FailingStore()


@pytest.fixture
def pending_boombox(engine, scheduler, store) -> BoomBox:
    """BoomBox whose engine has not signalled ready yet."""
    return BoomBox(engine, scheduler=scheduler, store=store)


@pytest.fixture
def boombox(pending_boombox, engine) -> BoomBox:
    engine.signal_ready()
    return pending_boombox


@pytest.fixture
def strict_boombox(engine, scheduler, store) -> BoomBox:
    """Ready BoomBox that raises BoomBoxError instead of logging it."""
    boombox = BoomBox(
        engine, scheduler=scheduler, store=store,
        config=BoomBoxConfig(raise_errors=True),
    )
    engine.signal_ready()
    return boombox


@pytest.fixture
def music(boombox) -> BoomBox:
    """Ready BoomBox with a "music" channel at 80 and sounds t1, t2."""
    boombox.add_channel("music", 80)
    boombox.add("t1", "track1.ogg")
    boombox.add("t2", "track2.ogg")
    return boombox
