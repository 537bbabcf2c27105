"""Unit tests for the history command."""

import json
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner
from zerotouch.cli.main import app
from zerotouch.core.state import StateManager
from zerotouch.models.history import HistoryActionType, HistoryEntry, HistoryItem

runner = CliRunner()


@pytest.fixture
def entries() -> list[HistoryEntry]:
    """A rollback, a four-campaign apply and an older apply, newest first."""
    return [
        HistoryEntry(
            id="abc123456789",
            timestamp="2026-03-02T10:00:00+00:00",
            action_type=HistoryActionType.ROLLBACK,
            snapshot_version=3,
            items=(HistoryItem(name="spring-sale", location="spring-sale"),),
            success=False,
            message="reload failed: kill: no such process",
        ),
        HistoryEntry(
            id="def678901234",
            timestamp="2026-03-01T09:00:00+00:00",
            action_type=HistoryActionType.APPLY,
            snapshot_version=2,
            items=tuple(HistoryItem(name=name) for name in ("a1", "b2", "c3", "d4")),
        ),
        HistoryEntry(
            id="ghi112233445",
            timestamp="2026-02-20T08:00:00+00:00",
            action_type=HistoryActionType.APPLY,
            snapshot_version=1,
            items=(HistoryItem(name="a1"),),
        ),
    ]


@pytest.fixture
def audit_log(entries: list[HistoryEntry]) -> Iterator[MagicMock]:
    """StateManager replaced by a mock returning ``entries``."""
    with patch("zerotouch.cli.commands.history.StateManager") as mock_cls:
        mock_cls.return_value.get_history.return_value = entries
        yield mock_cls.return_value


class TestHistoryCommand:
    """Tests for zerotouch history."""

    def test_help_lists_filters(self) -> None:
        result = runner.invoke(app, ["history", "--help"])

        assert result.exit_code == 0
        assert "--since" in result.stdout
        assert "--action" in result.stdout

    def test_empty_log(self, xdg_home: Path) -> None:
        result = runner.invoke(app, ["history"])

        assert result.exit_code == 0
        assert "No history entries found" in result.stdout

    def test_table(self, audit_log: MagicMock) -> None:
        """The table shows short IDs, action types and truncated campaign lists."""
        result = runner.invoke(app, ["history"])

        assert result.exit_code == 0
        assert "Configuration History" in result.stdout
        assert "abc12345" in result.stdout
        assert "def67890" in result.stdout
        assert "rollback" in result.stdout
        assert "apply" in result.stdout
        assert "(+1" in result.stdout

    def test_default_query(self, audit_log: MagicMock) -> None:
        runner.invoke(app, ["history"])

        audit_log.get_history.assert_called_once_with(limit=20, since=None, action_type=None)

    def test_filters_passed(self, audit_log: MagicMock) -> None:
        """--limit, --since and --action reach the log reader."""
        result = runner.invoke(
            app, ["history", "-n", "2", "--since", "2026-03-01", "--action", "rollback"]
        )

        assert result.exit_code == 0
        audit_log.get_history.assert_called_once_with(
            limit=2,
            since=datetime(2026, 3, 1),
            action_type=HistoryActionType.ROLLBACK,
        )

    def test_json(self, audit_log: MagicMock, entries: list[HistoryEntry]) -> None:
        audit_log.get_history.return_value = entries[:1]

        result = runner.invoke(app, ["history", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert len(data) == 1
        assert data[0]["action_type"] == "rollback"
        assert data[0]["snapshot_version"] == 3
        assert data[0]["success"] is False

    def test_invalid_since(self, xdg_home: Path) -> None:
        result = runner.invoke(app, ["history", "--since", "last-week"])

        assert result.exit_code == 1
        assert "Invalid date format" in result.output

    def test_unknown_action(self, xdg_home: Path) -> None:
        """An unknown --action value is a usage error."""
        result = runner.invoke(app, ["history", "--action", "deploy"])

        assert result.exit_code == 2


class TestHistoryFromStateFile:
    """history against a real audit log in the XDG state directory."""

    @pytest.fixture(autouse=True)
    def recorded(self, entries: list[HistoryEntry], xdg_home: Path) -> None:
        log = StateManager()
        for entry in reversed(entries):
            log.record_action(entry)

    def test_limit(self) -> None:
        result = runner.invoke(app, ["history", "--json", "-n", "1"])

        assert result.exit_code == 0
        assert [entry["id"] for entry in json.loads(result.stdout)] == ["abc123456789"]

    def test_since(self) -> None:
        result = runner.invoke(app, ["history", "--since", "2026-03-01", "--json"])

        assert result.exit_code == 0
        ids = [entry["id"] for entry in json.loads(result.stdout)]
        assert ids == ["abc123456789", "def678901234"]

    def test_action(self) -> None:
        result = runner.invoke(app, ["history", "-a", "apply", "-n", "1", "--json"])

        assert result.exit_code == 0
        assert [entry["id"] for entry in json.loads(result.stdout)] == ["def678901234"]
