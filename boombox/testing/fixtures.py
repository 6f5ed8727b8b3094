"""
Test Fixtures - Common fixtures for testing.

Provides:
    - Test audio generation
    - WAV files on disk
    - A BoomBox wired to a MockEngine and a ManualScheduler
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np

from boombox.testing.clock import ManualScheduler
from boombox.testing.mock import MockConfig, MockEngine

if TYPE_CHECKING:
    from boombox.config import BoomBoxConfig
    from boombox.mixer import BoomBox
    from boombox.settings import SettingsStore


def create_test_audio(
    duration: float = 1.0,
    sample_rate: int = 44100,
    frequency: float = 440.0,
    amplitude: float = 0.5,
    channels: int = 1,
    audio_type: str = "tone",
) -> np.ndarray:
    """
    Create test audio data.

    Args:
        duration: Duration in seconds
        sample_rate: Sample rate in Hz
        frequency: Frequency for tone (if audio_type == "tone")
        amplitude: Amplitude (0-1)
        channels: 1 returns shape (n,), more returns shape (n, channels)
        audio_type: Type of audio ("tone", "silence", "dc")

    Returns:
        Float32 numpy array
    """
    num_samples = int(duration * sample_rate)

    if audio_type == "tone":
        t = np.arange(num_samples, dtype=np.float32) / sample_rate
        audio = (np.sin(2 * np.pi * frequency * t) * amplitude).astype(np.float32)
    elif audio_type == "dc":
        # Constant level, handy for checking gain math
        audio = np.full(num_samples, amplitude, dtype=np.float32)
    else:
        audio = np.zeros(num_samples, dtype=np.float32)

    if channels > 1:
        audio = np.repeat(audio[:, None], channels, axis=1)
    return audio


def write_test_wav(path: Path | str, audio: np.ndarray | None = None, sample_rate: int = 44100) -> Path:
    """Write audio (a one second tone by default) to a 32-bit float WAV file."""
    import soundfile as sf

    if audio is None:
        audio = create_test_audio(sample_rate=sample_rate)
    path = Path(path)
    sf.write(str(path), audio, sample_rate, subtype="FLOAT")
    return path


def create_test_boombox(
    ready: bool = True,
    store: "SettingsStore | None" = None,
    config: "BoomBoxConfig | None" = None,
    mock_config: MockConfig | None = None,
) -> tuple["BoomBox", MockEngine, ManualScheduler]:
    """
    Create a BoomBox on a mock engine and virtual clock.

    Args:
        ready: Signal engine readiness before returning
        store: Settings store (in-memory by default)
        config: Mixer configuration
        mock_config: Mock engine configuration

    Returns:
        (boombox, engine, scheduler)
    """
    from boombox.mixer import BoomBox

    scheduler = ManualScheduler()
    engine = MockEngine(mock_config)
    boombox = BoomBox(engine, scheduler=scheduler, store=store, config=config)
    if ready:
        engine.signal_ready()
    return boombox, engine, scheduler
