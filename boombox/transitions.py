"""
Volume Transitions - Move a sound's volume toward a target over time.

Two strategies, selected by name:

    "none"    Set the volume at once.
    "fadeTo"  Step the volume every step_ms until it reaches the target.

Semantics:
    - A Transition is owned by its Sound (sound.transition). Starting
      any transition on a sound cancels the one already running there,
      so there is never more than one per sound and a cancelled
      transition's on_complete never fires.
    - A fade's step is ceil(step_ms * (target - current) / time_ms).
      Each tick reads the sound's live volume v and computes v + step.
      If that lands on or past the target, the volume snaps to exactly
      the target and on_complete(sound_id) fires once.
    - A fade always converges: a step that rounds to 0 becomes +/-1,
      and a step pointing away from the target (volume changed from
      outside mid-fade) is flipped.
    - time_ms <= 0 behaves like "none".
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import Callable

from boombox.config import validate_volume
from boombox.errors import InvalidArgumentError
from boombox.registry import Sound, SoundRegistry
from boombox.scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[str], None]


class TransitionKind(Enum):
    """Transition strategy names. The values are the public names."""

    NONE = "none"
    FADE_TO = "fadeTo"

    @classmethod
    def parse(cls, value: "str | TransitionKind") -> "TransitionKind":
        """Resolve a strategy name.

        Raises:
            InvalidArgumentError: If the name is unknown.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            names = ", ".join(repr(k.value) for k in cls)
            raise InvalidArgumentError(
                "transition",
                f"Unknown transition {value!r}, expected one of {names}",
                value=value,
            ) from None


class TransitionState(Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def fade_step(current: float, target: float, time_ms: float, step_ms: float) -> int:
    """Volume change per tick for a linear fade."""
    step = math.ceil(step_ms * (target - current) / time_ms)
    if step == 0 and target != current:
        step = 1 if target > current else -1
    return step


@dataclass(eq=False)
class Transition:
    """An interpolation in flight (or finished) on one sound."""

    sound_id: str
    kind: TransitionKind
    target: int | float
    step: int = 0
    interval_ms: float = 0
    on_complete: CompletionCallback | None = field(default=None, repr=False)
    state: TransitionState = TransitionState.RUNNING
    _timer: TimerHandle | None = field(default=None, repr=False)

    @property
    def active(self) -> bool:
        return self.state is TransitionState.RUNNING

    def cancel(self) -> bool:
        """Stop the transition without completing it.

        Returns:
            True if it was still running.
        """
        if not self.active:
            return False
        self.state = TransitionState.CANCELLED
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        return True


class TransitionEngine:
    """Runs transitions on registered sounds.

    Example:
        transitions = TransitionEngine(scheduler, sounds)

        # Fade "theme" to 80 over 500ms, then log
        transitions.run("fadeTo", "theme", 80, 500, on_complete=print)

        # Jump straight to silence
        transitions.run("none", "theme", 0, 0)
    """

    def __init__(self, scheduler: Scheduler, sounds: SoundRegistry, step_ms: float = 50):
        if step_ms <= 0:
            raise ValueError(f"step_ms must be > 0, got {step_ms}")
        self._scheduler = scheduler
        self._sounds = sounds
        self.step_ms = step_ms

    def run(
        self,
        kind: str | TransitionKind,
        sound_id: str,
        target: int | float,
        time_ms: float,
        on_complete: CompletionCallback | None = None,
    ) -> Transition:
        """Start a transition on a sound, replacing any running one.

        Raises:
            InvalidArgumentError: Unknown strategy or target outside 0-100.
            NotFoundError: Unknown sound.
        """
        kind = TransitionKind.parse(kind)
        validate_volume(target, "target")
        sound = self._sounds.require(sound_id)

        if kind is TransitionKind.NONE or time_ms <= 0:
            return self._instant(sound, kind, target, on_complete)
        return self._fade_to(sound, target, time_ms, on_complete)

    def cancel(self, sound_id: str) -> bool:
        """Cancel the running transition of a sound, if any."""
        sound = self._sounds.lookup(sound_id)
        if sound is None or sound.transition is None:
            return False
        cancelled = sound.transition.cancel()
        sound.transition = None
        return cancelled

    def cancel_all(self) -> int:
        return sum(1 for sound_id in list(self._sounds) if self.cancel(sound_id))

    def _replace(self, sound: Sound, transition: Transition) -> None:
        previous = sound.transition
        if previous is not None and previous.cancel():
            logger.debug(f"Replaced running transition on '{sound.id}'")
        sound.transition = transition

    def _instant(
        self,
        sound: Sound,
        kind: TransitionKind,
        target: int | float,
        on_complete: CompletionCallback | None,
    ) -> Transition:
        transition = Transition(sound.id, kind, target, on_complete=on_complete)
        self._replace(sound, transition)
        sound.set_volume(target)
        self._complete(sound, transition)
        return transition

    def _fade_to(
        self,
        sound: Sound,
        target: int | float,
        time_ms: float,
        on_complete: CompletionCallback | None,
    ) -> Transition:
        step = fade_step(sound.volume, target, time_ms, self.step_ms)
        transition = Transition(
            sound.id,
            TransitionKind.FADE_TO,
            target,
            step=step,
            interval_ms=self.step_ms,
            on_complete=on_complete,
        )
        self._replace(sound, transition)
        self._arm(sound, transition)
        return transition

    def _arm(self, sound: Sound, transition: Transition) -> None:
        transition._timer = self._scheduler.call_later(
            self.step_ms, partial(self._tick, sound, transition)
        )

    def _tick(self, sound: Sound, transition: Transition) -> None:
        if not transition.active:
            return

        current = sound.volume
        target = transition.target
        if transition.step * (target - current) < 0:
            transition.step = -transition.step

        volume = current + transition.step
        if (target - volume) * (target - current) <= 0:
            sound.set_volume(target)
            self._complete(sound, transition)
            return

        sound.set_volume(volume)
        self._arm(sound, transition)

    def _complete(self, sound: Sound, transition: Transition) -> None:
        transition.state = TransitionState.COMPLETED
        transition._timer = None
        if sound.transition is transition:
            sound.transition = None
        if transition.on_complete is not None:
            transition.on_complete(sound.id)
