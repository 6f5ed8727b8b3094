"""
BoomBox - Channel mixer for sound effects and music.

Architecture:
    BoomBox facade → Readiness Queue → Registries → Transitions → Engine

Public API (stable):
    BoomBox         - Main interface. add_channel(), add(), play(), stop(), mute()...
    BoomBoxConfig   - Defaults (fade times, transition) and error policy.
    PlayParams      - Options of a play() call.
    FadeParams      - Options of stop(), stop_channel(), mute(), unmute().
    JsonFileStore   - Persist channel volumes to a JSON file.
    MemoryStore     - Keep channel volumes in memory.

Engines:
    DeviceEngine    - Plays files on the local audio device (sounddevice).
    load_engine     - Build an engine by name ("device", "mock").

Testing:
    boombox.testing - MockEngine, ManualScheduler, fixtures.
"""

from boombox.config import BoomBoxConfig, PlayParams, FadeParams, validate_volume
from boombox.engine import (
    PlaybackEngine,
    SoundHandle,
    BasePlaybackEngine,
    DeviceEngine,
    load_engine,
    list_engines,
)
from boombox.errors import (
    BoomBoxError,
    InvalidArgumentError,
    NotFoundError,
    PersistenceError,
    PlaybackError,
)
from boombox.log import configure_logging
from boombox.mixer import BoomBox
from boombox.scheduler import AsyncioScheduler, Scheduler
from boombox.settings import ChannelSettings, JsonFileStore, MemoryStore, SettingsStore
from boombox.transitions import TransitionKind

__version__ = "1.0.0"

__all__ = [
    # Facade
    "BoomBox",
    "BoomBoxConfig",
    "PlayParams",
    "FadeParams",
    "validate_volume",
    # Engines
    "PlaybackEngine",
    "SoundHandle",
    "BasePlaybackEngine",
    "DeviceEngine",
    "load_engine",
    "list_engines",
    # Scheduling
    "Scheduler",
    "AsyncioScheduler",
    # Settings
    "SettingsStore",
    "ChannelSettings",
    "JsonFileStore",
    "MemoryStore",
    # Transitions
    "TransitionKind",
    # Errors
    "BoomBoxError",
    "InvalidArgumentError",
    "NotFoundError",
    "PersistenceError",
    "PlaybackError",
    # Logging
    "configure_logging",
    "__version__",
]
