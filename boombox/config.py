"""
Mixer configuration and per-call parameters.

BoomBoxConfig holds the defaults a BoomBox instance runs with.
PlayParams and FadeParams carry the options of a single play() or
stop()/mute()/unmute() call.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

from boombox.errors import InvalidArgumentError

MIN_VOLUME = 0
MAX_VOLUME = 100

SETTINGS_ENV_VAR = "BOOMBOX_SETTINGS"


def validate_volume(value: Any, argument: str = "volume") -> int | float:
    """Check that a volume is a number between 0 and 100.

    Raises:
        InvalidArgumentError: If the value is not numeric or out of range.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidArgumentError(
            argument,
            f"{argument} needs to be a number between {MIN_VOLUME} and {MAX_VOLUME}",
            value=value,
        )
    if not MIN_VOLUME <= value <= MAX_VOLUME:
        raise InvalidArgumentError(
            argument,
            f"{argument} needs to be a number between {MIN_VOLUME} and {MAX_VOLUME}, got {value}",
            value=value,
        )
    return value


def _validate_time(value: Any, argument: str) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidArgumentError(argument, f"{argument} must be a number of milliseconds", value=value)


def default_settings_path() -> Path:
    """Location of the JSON settings file used when none is given."""
    env = os.environ.get(SETTINGS_ENV_VAR)
    if env:
        return Path(env).expanduser()
    return Path.home() / ".boombox" / "settings.json"


@dataclass
class BoomBoxConfig:
    """Configuration for a BoomBox mixer.

    Args:
        step_ms: Interval between fade ticks in milliseconds.
        default_transition: Transition used when a call names none.
        start_time_ms: Default fade-in duration for play().
        stop_time_ms: Default fade-out duration for play()'s stop side and stop().
        fade_time_ms: Default fade duration for mute() and unmute().
        settings_key: Key under which channel settings are stored.
        raise_errors: Re-raise BoomBoxError from public calls instead of
            only logging them.
    """

    step_ms: int = 50
    default_transition: str = "fadeTo"
    start_time_ms: int = 500
    stop_time_ms: int = 500
    fade_time_ms: int = 500
    settings_key: str = "boomBox"
    raise_errors: bool = False

    def __post_init__(self) -> None:
        if self.step_ms <= 0:
            raise ValueError(f"step_ms must be > 0, got {self.step_ms}")
        for name in ("start_time_ms", "stop_time_ms", "fade_time_ms"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")
        if not self.settings_key:
            raise ValueError("settings_key cannot be empty")


# camelCase option names accepted in mappings
_ALIASES = {
    "stopAll": "stop_all",
    "startTime": "start_time",
    "stopTransition": "stop_transition",
    "stopTime": "stop_time",
}


def _normalize_options(kind: type, options: Mapping[str, Any]) -> dict[str, Any]:
    known = {f.name for f in fields(kind)}
    result = {}
    for key, value in options.items():
        name = _ALIASES.get(key, key)
        if name not in known:
            raise InvalidArgumentError(key, f"Unknown option '{key}'", value=value)
        result[name] = value
    return result


@dataclass(frozen=True)
class PlayParams:
    """Options for BoomBox.play().

    Attributes:
        loop: Restart the sound when it finishes instead of releasing it.
        restart: Seek to the start before playing.
        volume: Target volume; the channel volume when None.
        transition: Fade-in transition name ("none" or "fadeTo").
        start_time: Fade-in duration in ms.
        stop_all: Fade out and stop the channel's other sounds.
        stop_transition: Transition name for the sounds being stopped.
        stop_time: Fade-out duration in ms for the sounds being stopped.
        path: URL used to register the sound if it is unknown.
    """

    loop: bool = False
    restart: bool = False
    volume: int | float | None = None
    transition: str | None = None
    start_time: int | float | None = None
    stop_all: bool = True
    stop_transition: str | None = None
    stop_time: int | float | None = None
    path: str | None = None

    def __post_init__(self) -> None:
        if self.volume is not None:
            validate_volume(self.volume)
        _validate_time(self.start_time, "start_time")
        _validate_time(self.stop_time, "stop_time")

    @classmethod
    def from_options(
        cls,
        params: "PlayParams | Mapping[str, Any] | None" = None,
        **options: Any,
    ) -> "PlayParams":
        """Build params from an instance or mapping plus keyword overrides."""
        if params is None:
            base = cls()
        elif isinstance(params, cls):
            base = params
        else:
            base = cls(**_normalize_options(cls, params))
        if not options:
            return base
        return replace(base, **_normalize_options(cls, options))


@dataclass(frozen=True)
class FadeParams:
    """Options for BoomBox.stop(), stop_channel(), mute() and unmute().

    Attributes:
        transition: Transition name ("none" or "fadeTo").
        time: Fade duration in ms.
    """

    transition: str | None = None
    time: int | float | None = None

    def __post_init__(self) -> None:
        _validate_time(self.time, "time")

    @classmethod
    def from_options(
        cls,
        params: "FadeParams | Mapping[str, Any] | None" = None,
        **options: Any,
    ) -> "FadeParams":
        """Build params from an instance or mapping plus keyword overrides."""
        if params is None:
            base = cls()
        elif isinstance(params, cls):
            base = params
        else:
            base = cls(**_normalize_options(cls, params))
        if not options:
            return base
        return replace(base, **_normalize_options(cls, options))
