"""
BoomBox - Channel mixer facade.

Organizes named channels, each holding zero or more playing sounds,
and fades volumes when sounds start, stop, mute or swap.

Per-sound lifecycle:
    Unregistered --add()--> Idle --play()--> Playing --release--> Idle

    release happens when a sound is stopped (stop(), stop_channel(),
    or being swapped out by play()) or finishes without loop=True.

Usage:
    boombox = BoomBox(engine, scheduler=AsyncioScheduler(), store=JsonFileStore(path))
    boombox.add_channel("music", 80)
    boombox.add("theme", "theme.ogg")
    boombox.add("battle", "battle.ogg")

    boombox.play("music", "theme", loop=True)
    boombox.play("music", "battle")        # cross-fades theme -> battle
    boombox.mute("music")
    boombox.unmute("music")                # back to the channel's volume
    boombox.set_volume("music", 60)        # persisted

Failures (unknown channel, bad volume, ...) are logged and the call
becomes a no-op. Pass BoomBoxConfig(raise_errors=True) to get the
exceptions instead.
"""

from __future__ import annotations

import logging
from functools import partial, wraps
from typing import Any, Callable, Iterable, Mapping, TypeVar, Union

from boombox.config import BoomBoxConfig, FadeParams, PlayParams, validate_volume
from boombox.engine.base import PlaybackEngine
from boombox.errors import BoomBoxError, InvalidArgumentError, NotFoundError, PlaybackError
from boombox.readiness import AddSound, Command, PlaySounds, ReadinessQueue
from boombox.registry import ChannelRegistry, Sound, SoundRegistry
from boombox.scheduler import AsyncioScheduler, Scheduler
from boombox.settings import ChannelSettings, MemoryStore, SettingsStore
from boombox.transitions import TransitionEngine, TransitionKind

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

SoundIds = Union[str, Iterable[str]]


def _reported(method: F) -> F:
    """Log BoomBoxError raised by a public call instead of propagating it."""

    @wraps(method)
    def wrapper(self: "BoomBox", *args: Any, **kwargs: Any) -> Any:
        try:
            return method(self, *args, **kwargs)
        except BoomBoxError as e:
            logger.error(e.message)
            if self.config.raise_errors:
                raise
            return None

    return wrapper  # type: ignore[return-value]


class BoomBox:
    """The mixer. One instance owns its channels, sounds and settings.

    Args:
        engine: Playback backend. Its setup() is called here; calls made
            before it reports ready are queued and replayed in order.
        scheduler: Event loop for fade ticks. Defaults to the running
            asyncio loop.
        store: Where channel volumes persist. Defaults to an in-memory store.
        config: Defaults and error policy.
    """

    def __init__(
        self,
        engine: PlaybackEngine,
        scheduler: Scheduler | None = None,
        store: SettingsStore | None = None,
        config: BoomBoxConfig | None = None,
    ):
        self.config = config or BoomBoxConfig()
        self._engine = engine
        self._scheduler = scheduler or AsyncioScheduler()

        self._settings = ChannelSettings(
            store if store is not None else MemoryStore(),
            key=self.config.settings_key,
        )
        self._settings.load()

        self._sounds = SoundRegistry(engine)
        self._channels = ChannelRegistry(self._settings)
        self._transitions = TransitionEngine(
            self._scheduler, self._sounds, step_ms=self.config.step_ms
        )
        self._queue = ReadinessQueue()

        engine.setup(self._on_engine_ready)

    # ---------------------
    # Introspection
    # ---------------------
    @property
    def engine(self) -> PlaybackEngine:
        return self._engine

    @property
    def is_ready(self) -> bool:
        return self._queue.ready

    @property
    def transitions(self) -> TransitionEngine:
        return self._transitions

    def channels(self) -> list[str]:
        return list(self._channels)

    @_reported
    def members(self, channel: str) -> list[str] | None:
        """Ids of the sounds currently in a channel."""
        return self._channels.members_of(channel)

    def sound(self, sound_id: str) -> Sound | None:
        return self._sounds.lookup(sound_id)

    def is_playing(self, sound_id: str) -> bool:
        sound = self._sounds.lookup(sound_id)
        return sound is not None and sound.channel is not None

    # ---------------------
    # Channels and settings
    # ---------------------
    @_reported
    def add_channel(self, name: str, default_volume: int | float) -> None:
        """Create a channel. Does nothing if it already exists.

        A volume saved by an earlier session wins over default_volume.
        """
        self._channels.create(name, default_volume)

    def get_channel_volume(self, channel: str) -> int | float:
        """Configured volume of a channel, 0 if it has none."""
        return self._settings.volume_of(channel)

    @_reported
    def set_volume(self, channel: str, volume: int | float) -> None:
        """Set and persist a channel's volume and apply it to its sounds now."""
        validate_volume(volume)
        members = self._channels.members_of(channel)

        self._settings.set_volume(channel, volume)
        self._settings.save()

        for sound_id in members:
            self._sounds.require(sound_id).set_volume(volume)

    def save_settings(self) -> bool:
        return self._settings.save()

    # ---------------------
    # Sounds
    # ---------------------
    @_reported
    def add(self, sound_id: str, url: str) -> None:
        """Register a sound. Does nothing if the id is already known."""
        if self._known(sound_id):
            logger.debug(f"Sound '{sound_id}' already added")
            return
        self._add(sound_id, url)

    @_reported
    def play(
        self,
        channel: str,
        sound_ids: SoundIds,
        params: PlayParams | Mapping[str, Any] | None = None,
        **options: Any,
    ) -> None:
        """Play one or more sounds on a channel.

        Unless stop_all=False, the channel's other sounds are faded out
        and stopped while the requested ones fade in. Sounds already in
        the channel only get their volume faded.

        Options are the PlayParams fields, given as a PlayParams, a
        mapping, or keyword arguments (keywords win).
        """
        params = PlayParams.from_options(params, **options)
        ids = self._sound_ids(sound_ids)
        self._channels.require(channel)
        self._transition_kind(params.transition)
        self._transition_kind(params.stop_transition)

        missing = [sound_id for sound_id in ids if not self._known(sound_id)]
        if missing:
            if params.path is None or len(ids) != 1:
                raise NotFoundError("sound", missing[0], f"the sound {missing[0]} does not exist.")
            self._add(ids[0], params.path)

        if not self._queue.ready:
            self._queue.enqueue(PlaySounds(channel, tuple(ids), params))
            return

        self._play_now(channel, ids, params)

    @_reported
    def stop(
        self,
        sound_ids: SoundIds,
        params: FadeParams | Mapping[str, Any] | None = None,
        **options: Any,
    ) -> None:
        """Fade sounds out, then stop them. Idle or unknown sounds are skipped."""
        self._stop(self._sound_ids(sound_ids), FadeParams.from_options(params, **options))

    @_reported
    def stop_channel(
        self,
        channel: str,
        params: FadeParams | Mapping[str, Any] | None = None,
        **options: Any,
    ) -> None:
        """Stop every sound currently in a channel."""
        members = self._channels.members_of(channel)
        self._stop(members, FadeParams.from_options(params, **options))

    @_reported
    def mute(
        self,
        channel: str,
        params: FadeParams | Mapping[str, Any] | None = None,
        **options: Any,
    ) -> None:
        """Fade a channel's sounds to 0 without stopping them."""
        self._fade_channel(channel, lambda: 0, FadeParams.from_options(params, **options))

    @_reported
    def unmute(
        self,
        channel: str,
        params: FadeParams | Mapping[str, Any] | None = None,
        **options: Any,
    ) -> None:
        """Fade a channel's sounds back to the channel's configured volume."""
        self._fade_channel(
            channel,
            lambda: self._channels.volume_of(channel),
            FadeParams.from_options(params, **options),
        )

    # ---------------------
    # Engine-wide mute
    # ---------------------
    def mute_all(self) -> None:
        self._engine.mute()

    def unmute_all(self) -> None:
        self._engine.unmute()

    def is_muted(self) -> bool:
        return self._engine.muted

    def toggle_mute_all(self) -> None:
        if self._engine.muted:
            self._engine.unmute()
        else:
            self._engine.mute()

    def close(self) -> None:
        """Cancel running fades and release the engine."""
        cancelled = self._transitions.cancel_all()
        if cancelled:
            logger.debug(f"Cancelled {cancelled} running transition(s)")
        close = getattr(self._engine, "close", None)
        if close is not None:
            close()

    # ---------------------
    # Internals
    # ---------------------
    def _on_engine_ready(self) -> None:
        self._queue.drain(self._execute)

    def _execute(self, command: Command) -> None:
        if isinstance(command, AddSound):
            self._sounds.register(command.sound_id, command.url)
        elif isinstance(command, PlaySounds):
            self._play_now(command.channel, list(command.sound_ids), command.params)
        else:
            raise TypeError(f"Unknown command: {command!r}")

    def _known(self, sound_id: str) -> bool:
        return sound_id in self._sounds or self._queue.has_pending_add(sound_id)

    def _add(self, sound_id: str, url: str) -> None:
        if not self._queue.ready:
            self._queue.enqueue(AddSound(sound_id, url))
            return
        self._sounds.register(sound_id, url)

    def _play_now(self, channel: str, ids: list[str], params: PlayParams) -> None:
        # Resolve everything before touching any state
        self._channels.require(channel)
        sounds = [self._sounds.require(sound_id) for sound_id in ids]
        start_kind = self._transition_kind(params.transition)
        stop_kind = self._transition_kind(params.stop_transition)
        start_time = self._time(params.start_time, self.config.start_time_ms)
        stop_time = self._time(params.stop_time, self.config.stop_time_ms)
        target = params.volume if params.volume is not None else self._channels.volume_of(channel)

        # Start first: a sound the engine cannot play never joins the channel
        started: list[Sound] = []
        failures: list[PlaybackError] = []
        for sound in sounds:
            if sound.channel != channel:
                try:
                    self._start(channel, sound, params)
                except PlaybackError as e:
                    failures.append(e)
                    continue
            started.append(sound)

        if params.stop_all and started:
            for other in self._channels.members_of(channel):
                if other not in ids:
                    self._transitions.run(
                        stop_kind, other, 0, stop_time, on_complete=self._stop_sound
                    )

        for sound in started:
            self._transitions.run(start_kind, sound.id, target, start_time)

        if failures:
            for error in failures[1:]:
                logger.error(error.message)
            raise failures[0]

    def _start(self, channel: str, sound: Sound, params: PlayParams) -> None:
        try:
            if params.restart:
                sound.handle.set_position(0)
            sound.handle.play(
                on_finish=partial(self._on_finish, sound.id, params.loop),
                on_stop=partial(self._release, sound.id),
            )
        except Exception as e:
            raise PlaybackError(sound.id, "play", str(e)) from e
        self._channels.bind(channel, sound)
        logger.debug(f"Playing '{sound.id}' on '{channel}'")

    def _on_finish(self, sound_id: str, loop: bool) -> None:
        sound = self._sounds.lookup(sound_id)
        if sound is None or sound.channel is None:
            return
        if loop:
            try:
                sound.handle.play(
                    on_finish=partial(self._on_finish, sound_id, True),
                    on_stop=partial(self._release, sound_id),
                )
                return
            except Exception as e:
                logger.error(PlaybackError(sound_id, "replay", str(e)).message)
        self._release(sound_id)

    def _release(self, sound_id: str) -> None:
        sound = self._sounds.lookup(sound_id)
        if sound is None:
            return
        self._transitions.cancel(sound_id)
        sound.set_volume(0)
        if self._channels.release(sound):
            logger.debug(f"Released '{sound_id}'")

    def _stop(self, ids: list[str], params: FadeParams) -> None:
        kind = self._transition_kind(params.transition)
        time_ms = self._time(params.time, self.config.stop_time_ms)

        for sound_id in ids:
            sound = self._sounds.lookup(sound_id)
            if sound is None or sound.channel is None:
                continue
            self._transitions.run(kind, sound_id, 0, time_ms, on_complete=self._stop_sound)

    def _stop_sound(self, sound_id: str) -> None:
        sound = self._sounds.lookup(sound_id)
        if sound is None:
            return
        sound.handle.stop()
        if sound.channel is not None:
            self._release(sound_id)

    def _fade_channel(
        self,
        channel: str,
        target: Callable[[], int | float],
        params: FadeParams,
    ) -> None:
        members = self._channels.members_of(channel)
        kind = self._transition_kind(params.transition)
        time_ms = self._time(params.time, self.config.fade_time_ms)
        volume = target()
        for sound_id in members:
            self._transitions.run(kind, sound_id, volume, time_ms)

    def _transition_kind(self, name: str | None) -> TransitionKind:
        return TransitionKind.parse(name or self.config.default_transition)

    @staticmethod
    def _time(value: int | float | None, default: int | float) -> int | float:
        return default if value is None else value

    @staticmethod
    def _sound_ids(sound_ids: SoundIds) -> list[str]:
        if isinstance(sound_ids, str):
            return [sound_ids]
        ids = list(sound_ids)
        for sound_id in ids:
            if not isinstance(sound_id, str):
                raise InvalidArgumentError(
                    "sound_ids", f"sound ids must be strings, got {sound_id!r}", value=sound_id
                )
        return list(dict.fromkeys(ids))
