"""Settings persistence tests."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

from playerhook.errors import CommandError
from playerhook.settings import DEFAULT_SHELL, HookSettings, get_hook_settings


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    return tmp_path / "config"


class TestLoadAndSave:
    """Reading and writing the settings file."""

    @pytest.mark.asyncio
    async def test_missing_file_keeps_defaults(self, config_dir: Path):
        settings = await get_hook_settings(str(config_dir))
        assert settings.onevent is None
        assert settings.shell is None

    @pytest.mark.asyncio
    async def test_round_trip(self, config_dir: Path):
        settings = await get_hook_settings(str(config_dir))
        assert settings.update(onevent="notify-send $PLAYER_EVENT", shell="/bin/bash")
        settings.save()

        data = json.loads((config_dir / "settings.json").read_text())
        assert data["onevent"] == "notify-send $PLAYER_EVENT"
        assert "_settings_file" not in data

        loaded = await get_hook_settings(str(config_dir))
        assert loaded == settings

    @pytest.mark.asyncio
    async def test_corrupt_file_keeps_defaults(self, config_dir: Path, caplog):
        config_dir.mkdir()
        (config_dir / "settings.json").write_text("{not json")
        settings = await get_hook_settings(str(config_dir))
        assert settings.onevent is None
        assert "Failed to load settings" in caplog.text

    @pytest.mark.asyncio
    async def test_wrong_type_keeps_defaults(self, config_dir: Path):
        config_dir.mkdir()
        (config_dir / "settings.json").write_text(json.dumps({"onevent": "true", "shell": 5}))
        settings = await get_hook_settings(str(config_dir))
        assert settings.onevent is None
        assert settings.shell is None


class TestUpdate:
    """Updating settings fields."""

    def test_none_values_are_ignored(self):
        settings = HookSettings(onevent="true")
        assert not settings.update(onevent=None, shell=None)
        assert settings.onevent == "true"

    def test_unchanged_value(self):
        settings = HookSettings(onevent="true")
        assert not settings.update(onevent="true")

    def test_unknown_field(self):
        with pytest.raises(TypeError):
            HookSettings().update(volume="10")


class TestShell:
    """Choosing the shell."""

    def test_configured_shell(self, monkeypatch):
        monkeypatch.setenv("SHELL", "/bin/zsh")
        assert HookSettings(shell="/bin/dash").effective_shell() == "/bin/dash"

    def test_shell_from_environment(self, monkeypatch):
        monkeypatch.setenv("SHELL", "/bin/zsh")
        assert HookSettings().effective_shell() == "/bin/zsh"

    def test_default_shell(self, monkeypatch):
        monkeypatch.delenv("SHELL", raising=False)
        assert HookSettings().effective_shell() == DEFAULT_SHELL


@pytest.mark.skipif(sys.platform == "win32", reason="requires a POSIX shell")
class TestCredentials:
    """Resolving credentials through shell commands."""

    def test_password_command(self):
        settings = HookSettings(shell="/bin/sh", password_cmd="echo hunter2")
        assert settings.resolve_password() == "hunter2"

    def test_password_unset(self):
        assert HookSettings().resolve_password() is None

    def test_literal_username_wins(self):
        settings = HookSettings(shell="/bin/sh", username="alice", username_cmd="echo bob")
        assert settings.resolve_username() == "alice"

    def test_username_command(self):
        settings = HookSettings(shell="/bin/sh", username_cmd="printf 'bob\\n'")
        assert settings.resolve_username() == "bob"

    def test_failing_command_raises(self):
        settings = HookSettings(shell="/bin/sh", password_cmd="echo locked >&2; exit 1")
        with pytest.raises(CommandError) as exc_info:
            settings.resolve_password()
        assert exc_info.value.stderr == "locked\n"
