"""
Engine module - Playback backends behind the mixer.

The mixer only talks to the PlaybackEngine / SoundHandle protocols.
DeviceEngine plays files on the local audio device; a recording mock
for tests lives in boombox.testing.
"""

from boombox.engine.base import (
    PlaybackEngine,
    SoundHandle,
    BasePlaybackEngine,
    PlaybackCallback,
)
from boombox.engine.device import DeviceEngine, DeviceSound
from boombox.engine.loader import load_engine, list_engines

__all__ = [
    "PlaybackEngine",
    "SoundHandle",
    "BasePlaybackEngine",
    "PlaybackCallback",
    "DeviceEngine",
    "DeviceSound",
    "load_engine",
    "list_engines",
]
