"""
Device Engine - Plays sound files on the default audio output.

Uses soundfile to decode, numpy to mix and sounddevice for output.
All playing sounds are summed in a single OutputStream callback with a
per-sound gain of volume / 100.

Threading:
    The stream callback runs on PortAudio's thread. It only reads and
    advances playback positions under a lock; natural-end callbacks are
    handed to the mixer's event loop with call_soon_threadsafe().
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

import numpy as np

from boombox.engine.base import BasePlaybackEngine, PlaybackCallback
from boombox.scheduler import Scheduler

logger = logging.getLogger(__name__)


def fit_channels(data: np.ndarray, channels: int) -> np.ndarray:
    """Convert (frames, n) audio to (frames, channels)."""
    have = data.shape[1]
    if have == channels:
        return data
    if have == 1:
        return np.repeat(data, channels, axis=1)
    if channels == 1:
        return data.mean(axis=1, keepdims=True)
    if have > channels:
        return data[:, :channels]
    # Fewer source channels than outputs: average and spread
    return np.repeat(data.mean(axis=1, keepdims=True), channels, axis=1)


def resample_linear(data: np.ndarray, from_rate: int, to_rate: int) -> np.ndarray:
    """Simple linear resampling of (frames, channels) audio."""
    if from_rate == to_rate or len(data) == 0:
        return data

    new_length = max(1, int(round(len(data) * to_rate / from_rate)))
    src = np.arange(len(data), dtype=np.float64)
    dst = np.linspace(0, len(data) - 1, new_length)

    result = np.empty((new_length, data.shape[1]), dtype=np.float32)
    for ch in range(data.shape[1]):
        result[:, ch] = np.interp(dst, src, data[:, ch])
    return result


class DeviceSound:
    """A sound file played through a DeviceEngine."""

    def __init__(self, engine: "DeviceEngine", sound_id: str, url: str, volume: float = 0):
        self._engine = engine
        self._id = sound_id
        self.url = url
        self.volume = float(volume)

        self._data: np.ndarray | None = None
        self._position = 0
        self._playing = False
        self._on_finish: PlaybackCallback | None = None
        self._on_stop: PlaybackCallback | None = None

    @property
    def id(self) -> str:
        return self._id

    @property
    def loaded(self) -> bool:
        return self._data is not None

    @property
    def playing(self) -> bool:
        return self._playing

    @property
    def position(self) -> float:
        """Playback position in seconds."""
        return self._position / self._engine.samplerate

    @property
    def duration(self) -> float:
        if self._data is None:
            return 0.0
        return len(self._data) / self._engine.samplerate

    def load(self) -> None:
        """Decode the file into memory at the engine's rate and layout."""
        import soundfile as sf

        data, rate = sf.read(self.url, dtype="float32", always_2d=True)
        data = fit_channels(data, self._engine.channels)
        data = resample_linear(data, rate, self._engine.samplerate)

        with self._engine._lock:
            self._data = np.ascontiguousarray(data, dtype=np.float32)
        logger.debug(f"Loaded '{self._id}' from {self.url} ({len(data)} frames)")

    def play(
        self,
        on_finish: PlaybackCallback | None = None,
        on_stop: PlaybackCallback | None = None,
    ) -> None:
        if self._data is None:
            self.load()

        with self._engine._lock:
            self._on_finish = on_finish
            self._on_stop = on_stop
            if self._playing:
                return
            if self._position >= len(self._data):
                self._position = 0
            self._playing = True
            self._engine._active[self._id] = self

    def stop(self) -> None:
        with self._engine._lock:
            was_playing = self._playing
            self._playing = False
            self._position = 0
            self._engine._active.pop(self._id, None)
            callback = self._on_stop

        if was_playing and callback is not None:
            callback()

    def set_volume(self, volume: float) -> None:
        self.volume = float(volume)

    def set_position(self, seconds: float) -> None:
        with self._engine._lock:
            self._position = max(0, int(seconds * self._engine.samplerate))

    def _render(self, out: np.ndarray, frames: int, audible: bool) -> bool:
        """Mix the next block into out. Returns False once the sound has ended.

        Called with the engine lock held.
        """
        data = self._data
        length = min(frames, len(data) - self._position)

        if length > 0 and audible and self.volume > 0:
            gain = self.volume / 100.0
            out[:length] += data[self._position:self._position + length] * gain

        self._position += max(length, 0)
        if self._position >= len(data):
            self._playing = False
            self._position = 0
            return False
        return True

    def _finished(self) -> None:
        callback = self._on_finish
        if callback is not None:
            callback()


class DeviceEngine(BasePlaybackEngine):
    """Playback engine for the local audio device.

    Example:
        scheduler = AsyncioScheduler()
        engine = DeviceEngine(scheduler, samplerate=48000)
        boombox = BoomBox(engine, scheduler=scheduler)

    Sounds are decoded lazily on first play unless created with
    autoload=True.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        samplerate: int = 44100,
        channels: int = 2,
        blocksize: int = 1024,
        device: int | str | None = None,
    ):
        super().__init__()
        if samplerate <= 0:
            raise ValueError(f"samplerate must be > 0, got {samplerate}")
        if channels < 1:
            raise ValueError(f"channels must be >= 1, got {channels}")

        self._scheduler = scheduler
        self.samplerate = samplerate
        self.channels = channels
        self.blocksize = blocksize
        self._device = device

        self._lock = threading.Lock()
        self._active: dict[str, DeviceSound] = {}
        self._stream = None

    @property
    def name(self) -> str:
        return "device"

    @property
    def active_sounds(self) -> list[str]:
        with self._lock:
            return list(self._active)

    def setup(self, on_ready: Callable[[], None]) -> None:
        import sounddevice as sd

        self._stream = sd.OutputStream(
            samplerate=self.samplerate,
            blocksize=self.blocksize,
            channels=self.channels,
            dtype="float32",
            device=self._device,
            callback=self._callback,
        )
        self._stream.start()
        logger.info(
            f"Audio stream started: {self.samplerate}Hz, "
            f"{self.channels}ch, blocksize={self.blocksize}"
        )
        self._scheduler.call_soon(on_ready)

    def create_sound(
        self,
        sound_id: str,
        url: str,
        volume: float = 0,
        autoplay: bool = False,
        autoload: bool = False,
    ) -> DeviceSound:
        sound = DeviceSound(self, sound_id, url, volume)
        if autoload or autoplay:
            sound.load()
        if autoplay:
            sound.play()
        return sound

    def _callback(self, outdata: np.ndarray, frames: int, time_info, status) -> None:
        """sounddevice callback: sum every playing sound into outdata."""
        outdata.fill(0)
        finished: list[DeviceSound] = []

        with self._lock:
            audible = not self._muted
            for sound_id, sound in list(self._active.items()):
                if not sound._render(outdata, frames, audible):
                    del self._active[sound_id]
                    finished.append(sound)

        np.clip(outdata, -1.0, 1.0, out=outdata)

        for sound in finished:
            self._scheduler.call_soon_threadsafe(sound._finished)

    def close(self) -> None:
        if self._stream is None:
            return
        try:
            self._stream.stop()
            self._stream.close()
        except Exception as e:
            logger.warning(f"Error closing audio stream: {e}")
        self._stream = None
