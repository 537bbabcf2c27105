"""Unit tests for show command."""

from pathlib import Path

from typer.testing import CliRunner
from zerotouch.cli.main import app
from zerotouch.proxy.store import ConfigStore

runner = CliRunner()


class TestShowCommand:
    """Tests for zerotouch show."""

    def test_show_empty_baseline(self, xdg_home: Path) -> None:
        """A fresh store shows the empty version 0 snapshot."""
        result = runner.invoke(app, ["show"])

        assert result.exit_code == 0
        assert "# snapshot version 0" in result.stdout
        assert "# Generated by zerotouch." in result.stdout

    def test_show_current(self, committed_store: ConfigStore) -> None:
        """The current snapshot text is printed."""
        result = runner.invoke(app, ["show"])

        assert result.exit_code == 0
        assert "# snapshot version 1" in result.stdout
        assert committed_store.current.content_hash[:12] in result.stdout
        assert "location ^~ /spring-sale/ {" in result.stdout

    def test_show_previous(self, committed_store: ConfigStore) -> None:
        """--previous prints last-known-good."""
        result = runner.invoke(app, ["show", "--previous"])

        assert result.exit_code == 0
        assert "# snapshot version 0" in result.stdout
        assert "spring-sale" not in result.stdout

    def test_show_previous_without_history(self, xdg_home: Path) -> None:
        """Without a commit there is no last-known-good."""
        result = runner.invoke(app, ["show", "-p"])

        assert result.exit_code == 0
        assert "No last-known-good snapshot yet." in result.stdout
