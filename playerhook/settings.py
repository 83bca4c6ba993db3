"""Settings persistence for playerhook.

Settings are stored as JSON in ``~/.config/playerhook/settings.json`` by
default. Values given on the command line take precedence over stored ones.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, ClassVar

from playerhook.process import run_program

logger = logging.getLogger(__name__)

DEFAULT_SHELL = "/bin/sh"


@dataclass
class HookSettings:
    """Settings for running hook commands."""

    shell: str | None = None
    onevent: str | None = None
    username: str | None = None
    username_cmd: str | None = None
    password_cmd: str | None = None
    log_level: str | None = None

    # Internal state (not serialized)
    _settings_file: Path | None = field(default=None, repr=False, compare=False)

    _internal_fields: ClassVar[set[str]] = {"_settings_file"}

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to a dictionary for serialization."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name not in self._internal_fields
        }

    def effective_shell(self) -> str:
        """Return the configured shell, falling back to $SHELL and then /bin/sh."""
        return self.shell or os.environ.get("SHELL") or DEFAULT_SHELL

    def update(self, **updates: str | None) -> bool:
        """Update fields from non-None values and return whether any changed."""
        changed = False
        for field_name, value in updates.items():
            if field_name in self._internal_fields or field_name not in self.to_dict():
                raise TypeError(f"Unknown setting: {field_name}")
            if value is not None and getattr(self, field_name) != value:
                setattr(self, field_name, value)
                changed = True
        return changed

    def resolve_username(self) -> str | None:
        """Return the username, running ``username_cmd`` if no literal is set.

        Credential resolution is for hosts embedding playerhook, which call it
        once at startup. The command line tool does not use credentials.

        Raises:
            SubprocessError: If the command fails.
        """
        if self.username:
            return self.username
        if self.username_cmd:
            return run_program(self.effective_shell(), self.username_cmd).strip()
        return None

    def resolve_password(self) -> str | None:
        """Return the output of ``password_cmd``, or None if it is not set.

        Raises:
            SubprocessError: If the command fails.
        """
        if not self.password_cmd:
            return None
        return run_program(self.effective_shell(), self.password_cmd).strip()

    async def load(self) -> None:
        """Load settings from disk."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._load)

    def _load(self) -> None:
        """Load settings from the settings file (blocking I/O)."""
        if self._settings_file is None or not self._settings_file.exists():
            logger.debug("Settings file does not exist: %s", self._settings_file)
            return

        try:
            data = json.loads(self._settings_file.read_text())
            if not isinstance(data, dict):
                raise ValueError("settings must be a JSON object")
            loaded = {name: data.get(name) for name in self.to_dict()}
            for name, value in loaded.items():
                if value is not None and not isinstance(value, str):
                    raise ValueError(f"{name} must be a string")
            for name, value in loaded.items():
                setattr(self, name, value)
            logger.info("Loaded settings from %s", self._settings_file)
        except (ValueError, OSError) as e:
            logger.warning("Failed to load settings from %s: %s", self._settings_file, e)

    def save(self) -> None:
        """Save settings to the settings file (blocking I/O)."""
        if self._settings_file is None:
            return
        try:
            self._settings_file.parent.mkdir(parents=True, exist_ok=True)
            self._settings_file.write_text(json.dumps(self.to_dict(), indent=2) + "\n")
            logger.debug("Saved settings to %s", self._settings_file)
        except OSError as e:
            logger.warning("Failed to save settings to %s: %s", self._settings_file, e)


async def get_hook_settings(config_dir: str | None = None) -> HookSettings:
    """Create and load hook settings.

    Args:
        config_dir: Optional directory to store settings. Defaults to ~/.config/playerhook.

    Returns:
        HookSettings instance with settings loaded from disk.
    """
    config_path = Path(config_dir) if config_dir else Path.home() / ".config" / "playerhook"
    settings = HookSettings(_settings_file=config_path / "settings.json")
    await settings.load()
    return settings
