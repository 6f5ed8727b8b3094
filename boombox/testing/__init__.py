"""
BoomBox - Testing Utilities

Tools for testing code that drives a BoomBox without an audio device.

Components:
    MockEngine         - Playback engine that records calls
    ManualScheduler    - Virtual clock for fade ticks
    Fixtures           - Test audio and ready-made mixers

Usage:
    from boombox.testing import create_test_boombox

    boombox, engine, scheduler = create_test_boombox()
    boombox.add_channel("music", 80)
    boombox.add("theme", "theme.ogg")
    boombox.play("music", "theme")

    scheduler.run_until_idle()
    assert engine.sound("theme").volume == 80
"""

from boombox.testing.mock import (
    MockEngine,
    MockSound,
    MockConfig,
    CallRecord,
)

from boombox.testing.clock import (
    ManualScheduler,
    ManualTimer,
)

from boombox.testing.fixtures import (
    create_test_audio,
    write_test_wav,
    create_test_boombox,
)

__all__ = [
    # Mock
    "MockEngine",
    "MockSound",
    "MockConfig",
    "CallRecord",
    # Clock
    "ManualScheduler",
    "ManualTimer",
    # Fixtures
    "create_test_audio",
    "write_test_wav",
    "create_test_boombox",
]
