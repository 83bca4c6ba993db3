"""Run shell commands on player events."""

from playerhook.environment import event_to_env
from playerhook.errors import CommandError, SpawnError, SubprocessError, UndecodableOutputError
from playerhook.process import Child, run_program, spawn_program, spawn_program_on_event

__all__ = [
    "Child",
    "CommandError",
    "SpawnError",
    "SubprocessError",
    "UndecodableOutputError",
    "event_to_env",
    "run_program",
    "spawn_program",
    "spawn_program_on_event",
]
