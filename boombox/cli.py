"""
CLI - Command-line interface.

Thin wrapper over BoomBox + DeviceEngine:

    boombox play theme.ogg battle.ogg --channel music --fade 1000
    boombox volume music 60
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path

from boombox.config import BoomBoxConfig, default_settings_path
from boombox.errors import BoomBoxError
from boombox.log import LogLevel, configure_logging
from boombox.settings import ChannelSettings, JsonFileStore

logger = logging.getLogger(__name__)

# How often play waits check whether the current file is still playing
POLL_INTERVAL_S = 0.1


def main(args: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="boombox",
        description="Play sounds on named, volume-persisted channels",
    )
    parser.add_argument(
        "--settings",
        help=f"Settings file (default: ${{BOOMBOX_SETTINGS}} or {default_settings_path()})",
    )
    parser.add_argument(
        "--log-level",
        default="warning",
        choices=[level.value for level in LogLevel],
        help="Log level (default: warning)",
    )
    parser.add_argument("--json-logs", action="store_true", help="Log as JSON lines")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # play command
    play_parser = subparsers.add_parser("play", help="Play audio files on a channel")
    play_parser.add_argument("files", nargs="+", help="Audio files, played one after another")
    play_parser.add_argument("-c", "--channel", default="main", help="Channel name (default: main)")
    play_parser.add_argument("-v", "--volume", type=float, help="Volume 0-100 (default: channel volume)")
    play_parser.add_argument("-f", "--fade", type=int, default=500, help="Fade time in ms (default: 500)")
    play_parser.add_argument("-l", "--loop", action="store_true", help="Loop each file until Ctrl-C")

    # volume command
    volume_parser = subparsers.add_parser("volume", help="Set and save a channel's volume")
    volume_parser.add_argument("channel", help="Channel name")
    volume_parser.add_argument("value", type=float, help="Volume 0-100")

    # version command
    subparsers.add_parser("version", help="Show version")

    parsed = parser.parse_args(args)

    configure_logging(parsed.log_level, json_format=parsed.json_logs)

    if parsed.command is None:
        parser.print_help()
        return 0

    if parsed.command == "version":
        from boombox import __version__
        print(f"boombox {__version__}")
        return 0

    if parsed.command == "volume":
        return _cmd_volume(parsed)

    if parsed.command == "play":
        return _cmd_play(parsed)

    return 1


def _settings_path(args: argparse.Namespace) -> Path:
    return Path(args.settings).expanduser() if args.settings else default_settings_path()


def _cmd_volume(args: argparse.Namespace) -> int:
    """Handle volume command."""
    settings = ChannelSettings(JsonFileStore(_settings_path(args)))
    settings.load()

    try:
        settings.set_volume(args.channel, _number(args.value))
    except BoomBoxError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    if not settings.save():
        print("Error: could not save the settings", file=sys.stderr)
        return 1

    print(f"{args.channel}: {settings.volume_of(args.channel)}")
    return 0


def _cmd_play(args: argparse.Namespace) -> int:
    """Handle play command."""
    missing = [f for f in args.files if not Path(f).is_file()]
    if missing:
        for f in missing:
            print(f"Error: File not found: {f}", file=sys.stderr)
        return 1

    try:
        return asyncio.run(_play(args))
    except BoomBoxError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


async def _play(args: argparse.Namespace) -> int:
    from boombox.engine.device import DeviceEngine
    from boombox.mixer import BoomBox
    from boombox.scheduler import AsyncioScheduler

    loop = asyncio.get_running_loop()
    interrupted = asyncio.Event()
    try:
        loop.add_signal_handler(signal.SIGINT, interrupted.set)
    except NotImplementedError:
        # Windows event loops have no signal handlers; Ctrl-C then stops at once
        pass

    scheduler = AsyncioScheduler(loop)
    config = BoomBoxConfig(
        start_time_ms=args.fade,
        stop_time_ms=args.fade,
        fade_time_ms=args.fade,
        raise_errors=True,
    )
    engine = DeviceEngine(scheduler)
    boombox = BoomBox(
        engine,
        scheduler=scheduler,
        store=JsonFileStore(_settings_path(args)),
        config=config,
    )

    try:
        boombox.add_channel(args.channel, 100)
        for path in args.files:
            sound_id = str(Path(path).resolve())
            volume = _number(args.volume) if args.volume is not None else None
            boombox.play(args.channel, sound_id, path=path, loop=args.loop, volume=volume)
            print(f"Playing {path} on '{args.channel}'")

            while not interrupted.is_set():
                await asyncio.sleep(POLL_INTERVAL_S)
                if boombox.is_ready and not boombox.is_playing(sound_id):
                    break

            if interrupted.is_set():
                logger.info(f"Interrupted, fading out '{args.channel}'")
                boombox.stop_channel(args.channel)
                await asyncio.sleep(args.fade / 1000 + POLL_INTERVAL_S)
                return 130
        return 0
    finally:
        boombox.close()


def _number(value: float) -> int | float:
    """argparse gives floats; keep whole volumes as ints."""
    return int(value) if float(value).is_integer() else value


if __name__ == "__main__":
    sys.exit(main())
