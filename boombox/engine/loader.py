"""
Engine Loader - Build a playback engine by name.
"""

from __future__ import annotations

import logging

from boombox.engine.base import PlaybackEngine
from boombox.scheduler import Scheduler

logger = logging.getLogger(__name__)


def load_engine(
    engine: str,
    scheduler: Scheduler,
    **kwargs,
) -> PlaybackEngine:
    """Load a playback engine.

    Args:
        engine: Engine name. Options: "device", "mock"
        scheduler: Event loop the engine delivers callbacks on
        **kwargs: Additional engine-specific options

    Returns:
        Engine instance (not yet set up)

    Raises:
        ValueError: If the engine name is unknown
    """
    if engine == "device":
        from boombox.engine.device import DeviceEngine
        return DeviceEngine(scheduler, **kwargs)

    if engine == "mock":
        from boombox.testing.mock import MockEngine, MockConfig
        logger.info("Using mock playback engine")
        return MockEngine(MockConfig(ready_on_setup=True, **kwargs), scheduler=scheduler)

    raise ValueError(f"Unknown engine: {engine}")


def list_engines() -> list[str]:
    """List engine names load_engine() accepts."""
    return ["device", "mock"]
