"""Tests for the notebridge CLI via typer's CliRunner."""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from notebridge import __version__
from notebridge.cli.app import app
from notebridge.core.database import reset_engine
from notebridge.core.settings import get_settings

runner = CliRunner()


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    """Point the CLI at a throwaway SQLite file."""
    monkeypatch.setenv("NOTEBRIDGE_JWT_ACCESS_SECRET", "c" * 32)
    monkeypatch.setenv("NOTEBRIDGE_DATABASE_URL", f"sqlite:///{tmp_path / 'cli.db'}")
    monkeypatch.setenv("NOTEBRIDGE_BCRYPT_ROUNDS", "4")
    get_settings.cache_clear()
    reset_engine()
    yield
    get_settings.cache_clear()
    reset_engine()


class TestRoot:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("serve", "db", "users"):
            assert command in result.output


class TestDbCommands:
    def test_init_then_health(self, cli_env):
        assert runner.invoke(app, ["db", "init"]).exit_code == 0
        result = runner.invoke(app, ["db", "health"])
        assert result.exit_code == 0

    def test_drop_requires_confirmation(self, cli_env):
        runner.invoke(app, ["db", "init"])
        result = runner.invoke(app, ["db", "drop"], input="n\n")
        assert result.exit_code != 0

    def test_drop_with_yes(self, cli_env):
        runner.invoke(app, ["db", "init"])
        assert runner.invoke(app, ["db", "drop", "--yes"]).exit_code == 0


class TestUsersCommands:
    def test_create(self, cli_env):
        result = runner.invoke(app, ["users", "create", "admin@example.com", "--password", "s3cure-passw0rd", "--admin"])
        assert result.exit_code == 0, result.output

    def test_duplicate(self, cli_env):
        args = ["users", "create", "dup@example.com", "--password", "s3cure-passw0rd"]
        assert runner.invoke(app, args).exit_code == 0
        assert runner.invoke(app, args).exit_code == 1

    def test_short_password(self, cli_env):
        result = runner.invoke(app, ["users", "create", "a@example.com", "--password", "short"])
        assert result.exit_code == 1


class TestLogging:
    """The root callback configures structlog before any subcommand runs."""

    @pytest.mark.parametrize(("flags", "level"), [([], "WARNING"), (["--verbose"], "INFO")])
    def test_configured(self, cli_env, monkeypatch, flags, level):
        calls = []
        monkeypatch.setattr("notebridge.cli.app.configure_logging", lambda **kw: calls.append(kw))
        result = runner.invoke(app, [*flags, "db", "init"])
        assert result.exit_code == 0, result.output
        assert calls == [{"level": level, "json_format": False, "service": "notebridge-cli"}]
