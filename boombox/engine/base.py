"""
Engine Base - PlaybackEngine and SoundHandle protocols.

The mixer never decodes or outputs audio itself. Everything that
touches a backend goes through these two protocols.

ENGINE CONTRACT:
    Engines MUST:
        - Call the on_ready callback given to setup() exactly once, on
          the mixer's event loop thread, when sounds can be played
        - Create handles with the requested initial volume and not
          start loading or playing unless asked to
        - Deliver on_finish / on_stop on the event loop thread
        - Fire on_stop synchronously from stop() when the sound was playing
        - Treat volume as an integer-ish gain from 0 (silent) to 100 (full)

    Engines MUST NOT:
        - Touch channel membership (that's mixer work)
        - Fade volumes on their own
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Protocol, runtime_checkable

PlaybackCallback = Callable[[], None]


@runtime_checkable
class SoundHandle(Protocol):
    """A backend sound that can be played, stopped, sought and gained."""

    @property
    def id(self) -> str:
        ...

    def play(
        self,
        on_finish: PlaybackCallback | None = None,
        on_stop: PlaybackCallback | None = None,
    ) -> None:
        """Start playback; on_finish fires at the natural end, on_stop on stop()."""
        ...

    def stop(self) -> None:
        ...

    def set_volume(self, volume: float) -> None:
        ...

    def set_position(self, seconds: float) -> None:
        ...


@runtime_checkable
class PlaybackEngine(Protocol):
    """Protocol for playback backends."""

    @property
    def name(self) -> str:
        """Engine identifier (e.g., 'device', 'mock')."""
        ...

    @property
    def muted(self) -> bool:
        """Engine-wide mute state."""
        ...

    def setup(self, on_ready: Callable[[], None]) -> None:
        """Prepare the backend and call on_ready once it can play."""
        ...

    def create_sound(
        self,
        sound_id: str,
        url: str,
        volume: float = 0,
        autoplay: bool = False,
        autoload: bool = False,
    ) -> SoundHandle:
        ...

    def mute(self) -> None:
        ...

    def unmute(self) -> None:
        ...


class BasePlaybackEngine(ABC):
    """Base class for playback engines with common functionality."""

    def __init__(self) -> None:
        self._muted = False

    @property
    @abstractmethod
    def name(self) -> str:
        """Engine identifier."""
        ...

    @property
    def muted(self) -> bool:
        return self._muted

    @abstractmethod
    def setup(self, on_ready: Callable[[], None]) -> None:
        ...

    @abstractmethod
    def create_sound(
        self,
        sound_id: str,
        url: str,
        volume: float = 0,
        autoplay: bool = False,
        autoload: bool = False,
    ) -> SoundHandle:
        ...

    def mute(self) -> None:
        self._muted = True

    def unmute(self) -> None:
        self._muted = False

    def close(self) -> None:
        """Release backend resources. Default: nothing to release."""
