"""
Channel Settings - Persisted per-channel volume.

Settings are a mapping of channel name -> {"volume": 0..100}, stored as
one JSON string under a single key of a SettingsStore.

Usage:
    store = JsonFileStore("~/.boombox/settings.json")
    settings = ChannelSettings(store)
    settings.load()

    settings.set_volume("music", 80)
    settings.save()

Persistence is best-effort. A missing entry loads as empty settings,
corrupt data loads as empty settings with an error logged, and a failed
save is logged while the in-memory values stay authoritative.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Iterator, Protocol, runtime_checkable

from boombox.config import validate_volume
from boombox.errors import InvalidArgumentError, PersistenceError

logger = logging.getLogger(__name__)


@runtime_checkable
class SettingsStore(Protocol):
    """Key-value storage for serialized settings."""

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryStore:
    """SettingsStore kept in a dict. Lives as long as the process."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStore:
    """SettingsStore backed by a single JSON file.

    File structure:
        {
            "boomBox": "{\"music\": {\"volume\": 80}}",
            ...
        }

    Writes go to a temporary file in the same directory which then
    replaces the original, so a crash never leaves a half-written file.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not contain a JSON object")
        return data

    def get(self, key: str) -> str | None:
        value = self._read_all().get(key)
        if value is None or isinstance(value, str):
            return value
        return json.dumps(value)

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except ValueError as e:
            logger.warning(f"Replacing unreadable settings file {self.path}: {e}")
            data = {}
        data[key] = value

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class ChannelSettings:
    """In-memory channel volumes with best-effort persistence."""

    def __init__(self, store: SettingsStore, key: str = "boomBox"):
        self._store = store
        self._key = key
        self._entries: dict[str, dict[str, Any]] = {}

    @property
    def key(self) -> str:
        return self._key

    def __contains__(self, channel: str) -> bool:
        return channel in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def volume_of(self, channel: str) -> int | float:
        """Stored volume of a channel, 0 when it has no entry."""
        entry = self._entries.get(channel)
        if entry is None:
            return 0
        return entry["volume"]

    def set_volume(self, channel: str, volume: int | float) -> None:
        validate_volume(volume)
        self._entries.setdefault(channel, {})["volume"] = volume

    def seed(self, channel: str, volume: int | float) -> bool:
        """Give a channel a volume unless it already has one.

        Returns:
            True if an entry was created.
        """
        if channel in self._entries:
            return False
        self.set_volume(channel, volume)
        return True

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {name: dict(entry) for name, entry in self._entries.items()}

    def _read(self) -> dict[str, Any]:
        try:
            raw = self._store.get(self._key)
        except Exception as e:
            raise PersistenceError("load", str(e)) from e

        if not raw:
            return {}

        try:
            data = json.loads(raw)
        except ValueError as e:
            raise PersistenceError("load", f"invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise PersistenceError("load", "expected a JSON object")
        return data

    def load(self) -> bool:
        """Replace in-memory settings with the stored ones.

        Returns:
            False if stored data could not be read (settings are then empty).
        """
        try:
            data = self._read()
        except PersistenceError as e:
            logger.error(e.message)
            self._entries = {}
            return False

        entries: dict[str, dict[str, Any]] = {}
        for channel, entry in data.items():
            try:
                if not isinstance(entry, dict):
                    raise InvalidArgumentError("volume", "entry is not an object", value=entry)
                volume = validate_volume(entry.get("volume"))
            except InvalidArgumentError as e:
                logger.warning(f"Ignoring stored settings for channel '{channel}': {e.message}")
                continue
            entries[channel] = {**entry, "volume": volume}

        self._entries = entries
        logger.debug(f"Loaded settings for {len(entries)} channel(s)")
        return True

    def save(self) -> bool:
        """Write settings to the store.

        Returns:
            False if the store rejected the write.
        """
        try:
            self._store.set(self._key, json.dumps(self._entries))
        except Exception as e:
            logger.error(PersistenceError("save", str(e)).message)
            return False
        return True
