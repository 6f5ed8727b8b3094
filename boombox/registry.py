"""
Sound and Channel registries.

SoundRegistry owns every registered Sound and its engine handle.
ChannelRegistry owns the channels, i.e. which sound ids are currently
playing where, and reads nominal channel volumes from ChannelSettings.

Invariant:
    A sound id is a member of at most one channel at a time, and
    sound.channel names that channel (or is None when idle).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator

from boombox.config import validate_volume
from boombox.engine.base import PlaybackEngine, SoundHandle
from boombox.errors import NotFoundError, PlaybackError
from boombox.settings import ChannelSettings

if TYPE_CHECKING:
    from boombox.transitions import Transition

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Sound:
    """A registered sound.

    Attributes:
        id: Unique sound identifier.
        url: Where the engine loads it from.
        handle: Engine handle used to play/stop/seek/gain.
        volume: Current volume (0-100), changes during fades.
        channel: Name of the channel it plays in, None when idle.
        transition: Fade currently running on this sound, if any.
    """
    id: str
    url: str
    handle: SoundHandle
    volume: int | float = 0
    channel: str | None = None
    transition: "Transition | None" = field(default=None, repr=False)

    @property
    def playing(self) -> bool:
        return self.channel is not None

    def set_volume(self, volume: int | float) -> None:
        self.volume = volume
        self.handle.set_volume(volume)


class SoundRegistry:
    """Sound id -> Sound. Sounds are never removed."""

    def __init__(self, engine: PlaybackEngine):
        self._engine = engine
        self._sounds: dict[str, Sound] = {}

    def __contains__(self, sound_id: str) -> bool:
        return sound_id in self._sounds

    def __len__(self) -> int:
        return len(self._sounds)

    def __iter__(self) -> Iterator[str]:
        return iter(self._sounds)

    def register(self, sound_id: str, url: str) -> Sound | None:
        """Create a sound idle at volume 0.

        Returns:
            The new Sound, or None if the id was already registered.

        Raises:
            PlaybackError: If the engine cannot create the sound. Nothing
                is registered then.
        """
        if sound_id in self._sounds:
            return None

        try:
            handle = self._engine.create_sound(
                sound_id, url, volume=0, autoplay=False, autoload=False
            )
        except Exception as e:
            raise PlaybackError(sound_id, "create", str(e)) from e
        sound = Sound(id=sound_id, url=url, handle=handle)
        self._sounds[sound_id] = sound
        logger.debug(f"Registered sound '{sound_id}' ({url})")
        return sound

    def lookup(self, sound_id: str) -> Sound | None:
        return self._sounds.get(sound_id)

    def require(self, sound_id: str) -> Sound:
        sound = self._sounds.get(sound_id)
        if sound is None:
            raise NotFoundError("sound", sound_id, f"the sound {sound_id} does not exist.")
        return sound


class Channel:
    """A named bus. Members are kept in insertion order."""

    def __init__(self, name: str):
        self.name = name
        self._members: dict[str, None] = {}

    def __repr__(self) -> str:
        return f"Channel(name={self.name!r}, members={self.members!r})"

    def __contains__(self, sound_id: str) -> bool:
        return sound_id in self._members

    def __len__(self) -> int:
        return len(self._members)

    @property
    def members(self) -> list[str]:
        return list(self._members)

    def add(self, sound_id: str) -> None:
        self._members[sound_id] = None

    def discard(self, sound_id: str) -> bool:
        if sound_id not in self._members:
            return False
        del self._members[sound_id]
        return True


class ChannelRegistry:
    """Channel name -> Channel, plus nominal volumes from settings."""

    def __init__(self, settings: ChannelSettings):
        self._settings = settings
        self._channels: dict[str, Channel] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._channels

    def __len__(self) -> int:
        return len(self._channels)

    def __iter__(self) -> Iterator[str]:
        return iter(self._channels)

    @property
    def settings(self) -> ChannelSettings:
        return self._settings

    def create(self, name: str, default_volume: int | float) -> bool:
        """Create a channel; seed its volume if settings have none.

        Existing channels and stored volumes are left alone.

        Returns:
            True if the channel was created.
        """
        if name in self._channels:
            return False

        validate_volume(default_volume, "default_volume")
        self._channels[name] = Channel(name)
        if self._settings.seed(name, default_volume):
            logger.debug(f"Channel '{name}' created at default volume {default_volume}")
        else:
            logger.debug(
                f"Channel '{name}' created at stored volume {self._settings.volume_of(name)}"
            )
        return True

    def require(self, name: str) -> Channel:
        channel = self._channels.get(name)
        if channel is None:
            raise NotFoundError("channel", name, f"unknown channel {name}")
        return channel

    def members_of(self, name: str) -> list[str]:
        return self.require(name).members

    def volume_of(self, name: str) -> int | float:
        return self._settings.volume_of(name)

    def bind(self, name: str, sound: Sound) -> None:
        """Make sound a member of channel name, leaving any other channel."""
        channel = self.require(name)
        if sound.channel is not None and sound.channel != name:
            previous = self._channels.get(sound.channel)
            if previous is not None:
                previous.discard(sound.id)
            logger.debug(f"Moved sound '{sound.id}' from '{sound.channel}' to '{name}'")
        channel.add(sound.id)
        sound.channel = name

    def release(self, sound: Sound) -> bool:
        """Remove sound from its channel.

        Returns:
            True if it was a member of a channel.
        """
        if sound.channel is None:
            return False
        channel = self._channels.get(sound.channel)
        sound.channel = None
        if channel is None:
            return False
        return channel.discard(sound.id)
