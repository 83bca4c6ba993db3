"""Errors raised while running hook commands."""

from __future__ import annotations


class SubprocessError(Exception):
    """A hook command could not be run or did not succeed.

    Carries the shell and command that were run, plus at most one of the
    underlying OS error or the command's decoded stderr.
    """

    def __init__(
        self,
        shell: str,
        command: str,
        *,
        cause: OSError | None = None,
        stderr: str | None = None,
    ) -> None:
        if cause is not None and stderr is not None:
            raise ValueError("SubprocessError takes either cause or stderr, not both")
        self.shell = shell
        self.command = command
        self.cause = cause
        self.stderr = stderr
        super().__init__(self._message())

    def _message(self) -> str:
        message = f"Failed to run {self.command!r} using {self.shell!r}"
        if self.cause is not None:
            return f"{message}: {self.cause}"
        if self.stderr is not None:
            return f"{message}: {self.stderr.strip() or '(empty stderr)'}"
        return message


class SpawnError(SubprocessError):
    """The shell could not be launched, or its output could not be relayed."""

    def __init__(self, shell: str, command: str, cause: OSError) -> None:
        super().__init__(shell, command, cause=cause)


class CommandError(SubprocessError):
    """The command exited with a non-zero status."""

    def __init__(self, shell: str, command: str, stderr: str) -> None:
        super().__init__(shell, command, stderr=stderr)


class UndecodableOutputError(SubprocessError):
    """The command's output was not valid UTF-8 text."""

    def __init__(self, shell: str, command: str) -> None:
        super().__init__(shell, command)
