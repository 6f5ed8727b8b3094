"""
BoomBox Errors - Domain-specific error types.

Error hierarchy:
    BoomBoxError (base)
    ├── InvalidArgumentError
    ├── NotFoundError
    ├── PersistenceError
    └── PlaybackError

None of these are fatal. The mixer facade logs them and carries on
unless it was configured with ``raise_errors=True``.
"""

from __future__ import annotations

from typing import Any


class BoomBoxError(Exception):
    """Base error for all mixer-related errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidArgumentError(BoomBoxError):
    """
    Raised when a caller passes a value the mixer cannot accept.

    Examples:
    - Volume outside 0-100
    - Unknown transition name

    Always raised before any state is mutated.
    """

    def __init__(
        self,
        argument: str,
        message: str,
        value: Any = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.argument = argument
        self.value = value


class NotFoundError(BoomBoxError):
    """
    Raised when a channel or sound is unknown.

    Examples:
    - play() on a channel that was never added
    - play() of an unregistered sound without a path fallback
    """

    def __init__(
        self,
        kind: str,
        name: str,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        msg = message or f"Unknown {kind} '{name}'"
        super().__init__(msg, details)
        self.kind = kind
        self.name = name


class PersistenceError(BoomBoxError):
    """
    Raised when channel settings cannot be loaded or saved.

    The settings layer recovers from these locally: a failed load
    leaves settings empty, a failed save keeps the in-memory state.
    """

    def __init__(
        self,
        operation: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(f"Could not {operation} the settings: {message}", details)
        self.operation = operation


class PlaybackError(BoomBoxError):
    """
    Raised when the playback engine fails on a sound.

    Examples:
    - create_sound() rejects the url
    - play() cannot decode the file

    The mixer leaves the sound unregistered (create) or idle (play).
    """

    def __init__(
        self,
        sound_id: str,
        operation: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(f"Could not {operation} the sound {sound_id}: {message}", details)
        self.sound_id = sound_id
        self.operation = operation
