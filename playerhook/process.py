"""Running hook commands in subprocesses.

Commands always run as ``<shell> -c <command>``. A command spawned for a
player event receives the event through environment variables (see
:mod:`playerhook.environment`). When it exits successfully its stdout is
copied to ours; otherwise its stderr is returned inside a
:class:`~playerhook.errors.CommandError`.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import subprocess
import sys
from collections.abc import Mapping
from typing import BinaryIO

from playerhook.environment import event_to_env
from playerhook.errors import CommandError, SpawnError, UndecodableOutputError
from playerhook.events import PlayerEvent

logger = logging.getLogger(__name__)


def run_program(shell: str, command: str) -> str:
    """Run a command to completion, blocking the calling thread.

    Meant for one-shot commands outside the event loop, such as resolving a
    password at startup.

    Args:
        shell: Path of the shell used to run the command.
        command: Command text passed to ``shell -c``.

    Returns:
        The command's stdout.

    Raises:
        SpawnError: If the shell could not be launched.
        CommandError: If the command exited with a non-zero status.
        UndecodableOutputError: If stdout or stderr was not valid UTF-8.
    """
    logger.info("Running %r using %r", command, shell)
    try:
        result = subprocess.run(
            [shell, "-c", command],
            stdin=subprocess.DEVNULL,
            capture_output=True,
            check=False,
        )
    except OSError as err:
        raise SpawnError(shell, command, err) from err

    if result.returncode != 0:
        try:
            stderr = result.stderr.decode()
        except UnicodeDecodeError:
            raise UndecodableOutputError(shell, command) from None
        raise CommandError(shell, command, stderr)

    try:
        return result.stdout.decode()
    except UnicodeDecodeError:
        raise UndecodableOutputError(shell, command) from None


async def spawn_program(
    shell: str, command: str, env: Mapping[str, str] | None = None
) -> Child:
    """Start a command without waiting for it.

    ``env`` is added to the inherited environment, overriding inherited
    variables of the same name. stdin, stdout and stderr are all piped.

    Raises:
        SpawnError: If the shell could not be launched.
    """
    env = dict(env or {})
    logger.info("Running %r using %r with environment variables %r", command, shell, env)
    try:
        proc = await asyncio.create_subprocess_exec(
            shell,
            "-c",
            command,
            env={**os.environ, **env},
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as err:
        raise SpawnError(shell, command, err) from err
    return Child(command, proc, shell)


async def spawn_program_on_event(shell: str, command: str, event: PlayerEvent) -> Child:
    """Start a command with the environment describing a player event."""
    return await spawn_program(shell, command, event_to_env(event))


class Child:
    """A running hook command.

    Await :meth:`wait` exactly once. On success the command's stdout is
    written to our stdout; on failure its stderr is raised as an error
    together with the command and the shell that ran it.
    """

    def __init__(self, command: str, proc: asyncio.subprocess.Process, shell: str) -> None:
        """Initialize the child.

        Args:
            command: The command text that was run.
            proc: The running shell process.
            shell: The shell that runs the command.
        """
        self.command = command
        self.shell = shell
        self._proc: asyncio.subprocess.Process | None = proc

    @property
    def pid(self) -> int | None:
        """Process id, or None once the child has been waited on."""
        return self._proc.pid if self._proc is not None else None

    async def wait(self, stdout: BinaryIO | None = None) -> None:
        """Wait for the command to exit and relay its result.

        The child's stdin is closed right away. If the awaiting task is
        cancelled while stdout is being relayed, the write still completes
        before the cancellation propagates.

        Args:
            stdout: Binary stream receiving the command's stdout on success.
                Defaults to this process's stdout.

        Raises:
            RuntimeError: If the child was already waited on.
            SpawnError: If collecting output or writing to stdout failed.
            CommandError: If the command exited with a non-zero status.
            UndecodableOutputError: If a failed command's stderr was not UTF-8.
        """
        proc = self._proc
        if proc is None:
            raise RuntimeError(f"Child for {self.command!r} was already waited on")
        self._proc = None

        try:
            # Empty input closes the child's stdin so commands reading it see EOF
            out, err = await proc.communicate(b"")
        except OSError as e:
            raise SpawnError(self.shell, self.command, e) from e
        finally:
            if proc.returncode is None:
                # Interrupted before exit, don't leave an orphaned process behind
                with contextlib.suppress(ProcessLookupError):
                    proc.kill()
                await asyncio.shield(proc.wait())

        if proc.returncode != 0:
            logger.debug("%r exited with status %s", self.command, proc.returncode)
            try:
                stderr = err.decode()
            except UnicodeDecodeError:
                raise UndecodableOutputError(self.shell, self.command) from None
            raise CommandError(self.shell, self.command, stderr)

        sink = stdout if stdout is not None else sys.stdout.buffer
        loop = asyncio.get_running_loop()
        relay = loop.run_in_executor(None, _write_and_flush, sink, out)
        try:
            await asyncio.shield(relay)
        except OSError as e:
            raise SpawnError(self.shell, self.command, e) from e
        except asyncio.CancelledError:
            # The write is already running, let it finish before propagating
            with contextlib.suppress(OSError):
                await relay
            raise


def _write_and_flush(sink: BinaryIO, data: bytes) -> None:
    """Write bytes to a stream and flush it (blocking I/O)."""
    sink.write(data)
    sink.flush()
