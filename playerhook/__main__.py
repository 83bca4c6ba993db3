"""Command line entry point for playerhook.

Reads player events as JSON lines from stdin and runs the ``--onevent``
command for each one::

    echo '{"event": "VolumeChanged", "volume": 1200}' | playerhook --onevent 'echo $VOLUME'
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import AsyncIterator, Sequence

from playerhook.dispatcher import HookDispatcher
from playerhook.errors import SubprocessError
from playerhook.events import PlayerEvent, event_from_dict
from playerhook.process import run_program
from playerhook.settings import HookSettings, get_hook_settings
from playerhook.utils import read_lines

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="playerhook",
        description="Run a command for every player event read from stdin.",
    )
    parser.add_argument("--onevent", help="Command run for each player event")
    parser.add_argument("--shell", help="Shell used to run commands (default: $SHELL)")
    parser.add_argument("--config-dir", help="Settings directory (default: ~/.config/playerhook)")
    parser.add_argument("--log-level", choices=LOG_LEVELS, help="Logging level")
    parser.add_argument("--run", metavar="CMD", help="Run a single command, print its output and exit")
    parser.add_argument(
        "--save", action="store_true", help="Store --onevent and --shell in the settings file"
    )
    return parser.parse_args(argv)


async def _read_events(stats: dict[str, int]) -> AsyncIterator[PlayerEvent]:
    async for line in read_lines(sys.stdin):
        line = line.strip()
        if not line:
            continue
        try:
            data = json.loads(line)
            if not isinstance(data, dict):
                raise ValueError("expected a JSON object")
            yield event_from_dict(data)
        except ValueError as err:
            stats["invalid"] += 1
            logger.error("Ignoring invalid event %r: %s", line, err)


async def _run_events(settings: HookSettings) -> int:
    if not settings.onevent:
        logger.error("No command configured, pass --onevent")
        return 2

    dispatcher = HookDispatcher(settings.effective_shell(), settings.onevent)
    stats = {"invalid": 0}
    await dispatcher.run(_read_events(stats))

    if dispatcher.failures or stats["invalid"]:
        logger.warning(
            "%d hook invocation(s) failed, %d invalid event(s)",
            dispatcher.failures,
            stats["invalid"],
        )
        return 1
    return 0


async def _async_main(args: argparse.Namespace) -> int:
    logging.basicConfig(
        level=args.log_level or "INFO",
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    settings = await get_hook_settings(args.config_dir)

    if settings.log_level is not None:
        stored_level = settings.log_level.upper()
        if stored_level not in LOG_LEVELS:
            logger.error(
                "Invalid log_level %r in settings, expected one of %s",
                settings.log_level,
                ", ".join(LOG_LEVELS),
            )
            return 2
        if args.log_level is None:
            logging.getLogger().setLevel(stored_level)

    if settings.update(shell=args.shell, onevent=args.onevent) and args.save:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, settings.save)

    if args.run is not None:
        try:
            output = run_program(settings.effective_shell(), args.run)
        except SubprocessError as err:
            logger.error("%s", err)
            return 1
        sys.stdout.write(output)
        sys.stdout.flush()
        return 0

    return await _run_events(settings)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the playerhook command line."""
    args = parse_args(argv)
    try:
        return asyncio.run(_async_main(args))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
