"""Unit tests for the main CLI application.

Tests for global options and command registration.
"""

from pathlib import Path

import pytest
from typer.testing import CliRunner
from zerotouch import __version__
from zerotouch.cli.main import app

runner = CliRunner()


class TestMainApp:
    """Tests for the zerotouch entry point."""

    @pytest.mark.parametrize("flag", ["--version", "-V"])
    def test_version(self, flag: str) -> None:
        """--version prints the version and exits cleanly."""
        result = runner.invoke(app, [flag])

        assert result.exit_code == 0
        assert f"zerotouch version {__version__}" in result.stdout

    @pytest.mark.parametrize("flag", ["--help", "-h"])
    def test_help_lists_commands(self, flag: str) -> None:
        """Help lists every command."""
        result = runner.invoke(app, [flag])

        assert result.exit_code == 0
        for command in (
            "scan",
            "watch",
            "status",
            "classify",
            "show",
            "revert",
            "clear-fatal",
            "history",
            "init",
        ):
            assert command in result.stdout

    def test_invalid_settings_file(self, xdg_home: Path) -> None:
        """A broken --config file stops the command with exit code 1."""
        settings_path = xdg_home / "broken.toml"
        settings_path.write_text("[proxy\n")

        result = runner.invoke(app, ["--config", str(settings_path), "status"])

        assert result.exit_code == 1
        assert "Invalid TOML syntax" in result.output
