"""Dispatching player events to the configured hook command."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable
from typing import BinaryIO

from playerhook.errors import SubprocessError
from playerhook.events import PlayerEvent
from playerhook.process import spawn_program_on_event
from playerhook.utils import create_task

logger = logging.getLogger(__name__)


class HookDispatcher:
    """Runs the hook command once per player event.

    Each event gets its own subprocess. Invocations run concurrently and a
    failing one is logged without affecting the others.
    """

    def __init__(self, shell: str, command: str, stdout: BinaryIO | None = None) -> None:
        """Initialize the dispatcher.

        Args:
            shell: Shell used to run the command.
            command: Hook command run for every event.
            stdout: Stream receiving hook output. Defaults to our stdout.
        """
        self._shell = shell
        self._command = command
        self._stdout = stdout
        self._tasks: set[asyncio.Task[None]] = set()
        self.failures = 0

    @property
    def pending(self) -> int:
        """Number of hook invocations still running."""
        return len(self._tasks)

    def dispatch(self, event: PlayerEvent) -> asyncio.Task[None]:
        """Start the hook command for an event and return its task."""
        task = create_task(self._run_hook(event), name=f"hook-{type(event).__name__}")
        if not task.done():
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        return task

    async def _run_hook(self, event: PlayerEvent) -> None:
        try:
            child = await spawn_program_on_event(self._shell, self._command, event)
            await child.wait(self._stdout)
        except SubprocessError as err:
            self.failures += 1
            logger.error("Hook for %s failed: %s", type(event).__name__, err)

    async def drain(self) -> None:
        """Wait for all running hook invocations to finish."""
        while self._tasks:
            await asyncio.gather(*self._tasks)

    async def run(self, events: AsyncIterable[PlayerEvent]) -> None:
        """Dispatch every event from a stream, then wait for the hooks."""
        async for event in events:
            self.dispatch(event)
        await self.drain()
