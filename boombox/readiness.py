"""
Readiness Queue - Commands issued before the engine is ready.

Until the playback engine signals ready, add() and play() calls are
recorded as tagged commands instead of being executed. When the ready
signal arrives the queue is drained once, in submission order, and from
then on it is bypassed.

Commands are plain data (AddSound, PlaySounds), so what gets replayed
is exactly what was asked for, params included.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Union

from boombox.config import PlayParams

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AddSound:
    """Register a sound."""
    sound_id: str
    url: str


@dataclass(frozen=True)
class PlaySounds:
    """Play one or more sounds on a channel."""
    channel: str
    sound_ids: tuple[str, ...]
    params: PlayParams = PlayParams()


Command = Union[AddSound, PlaySounds]


class ReadinessQueue:
    """FIFO of commands waiting for the engine.

    Usage:
        queue = ReadinessQueue()

        if not queue.ready:
            queue.enqueue(AddSound("click", "click.wav"))

        # engine ready callback
        queue.drain(execute)
    """

    def __init__(self) -> None:
        self._pending: deque[Command] = deque()
        self._ready = False
        self._draining = False

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def draining(self) -> bool:
        return self._draining

    def __len__(self) -> int:
        return len(self._pending)

    def pending(self) -> list[Command]:
        """Snapshot of queued commands, oldest first."""
        return list(self._pending)

    def enqueue(self, command: Command) -> None:
        if self._ready:
            raise RuntimeError("Queue is already drained; execute commands directly")
        self._pending.append(command)
        logger.debug(f"Queued {command} until the engine is ready")

    def has_pending_add(self, sound_id: str) -> bool:
        return any(
            isinstance(command, AddSound) and command.sound_id == sound_id
            for command in self._pending
        )

    def drain(self, dispatch: Callable[[Command], None]) -> int:
        """Replay every queued command through dispatch, then mark ready.

        Commands queued while draining run in the same pass, after the
        ones queued before them. A command that raises is logged and the
        rest still run.

        Returns:
            Number of commands dispatched.
        """
        if self._ready or self._draining:
            logger.warning("Engine signalled ready more than once; ignoring")
            return 0

        self._draining = True
        count = 0
        try:
            while self._pending:
                command = self._pending.popleft()
                count += 1
                try:
                    dispatch(command)
                except Exception as e:
                    logger.error(f"Queued {type(command).__name__} failed: {e}")
        finally:
            self._draining = False
            self._ready = True

        logger.info(f"Engine ready; replayed {count} queued command(s)")
        return count
