"""Unit tests for status command.

State files are written under a temporary XDG state directory.
"""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner
from zerotouch.cli.main import app
from zerotouch.core.paths import (
    get_fatal_marker_path,
    get_last_scan_path,
    get_store_path,
)
from zerotouch.models.report import (
    CampaignReport,
    ChangeType,
    Outcome,
    ScanMetadata,
    ScanReport,
)
from zerotouch.proxy.store import ConfigStore

runner = CliRunner()


@pytest.fixture
def last_report(xdg_home: Path) -> ScanReport:
    """A saved report of a committed scan."""
    report = ScanReport(
        metadata=ScanMetadata(
            timestamp="2026-03-01T09:00:00+00:00",
            hostname="edge-01",
            zerotouch_version="0.3.0",
            root="/var/www/campaigns",
        ),
        campaigns=[
            CampaignReport(
                name="spring-sale",
                change=ChangeType.ADDED,
                outcome=Outcome.COMMITTED,
                campaign_type="static",
                location="spring-sale",
            )
        ],
        snapshot_version=1,
        committed=True,
    )
    report.save(get_last_scan_path())
    return report


class TestStatusCommand:
    """Tests for zerotouch status."""

    def test_status_help(self) -> None:
        """Status command shows help."""
        result = runner.invoke(app, ["status", "--help"])

        assert result.exit_code == 0
        assert "--json" in result.stdout

    def test_status_before_first_scan(self, xdg_home: Path) -> None:
        """A fresh install shows version 0 and no scan."""
        result = runner.invoke(app, ["status"])

        assert result.exit_code == 0
        assert "Snapshot version: 0" in result.stdout
        assert "No scan has run yet." in result.stdout

    def test_status_with_report(
        self, committed_store: ConfigStore, last_report: ScanReport
    ) -> None:
        """The last scan report is summarized."""
        result = runner.invoke(app, ["status"])

        assert result.exit_code == 0
        assert "Snapshot version: 1" in result.stdout
        assert "Snapshot version 1 is live." in result.stdout

    def test_status_json(self, committed_store: ConfigStore, last_report: ScanReport) -> None:
        """--json reports the store, lock and last scan."""
        result = runner.invoke(app, ["status", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["snapshot_version"] == 1
        assert data["campaigns"] == ["spring-sale"]
        assert data["last_known_good_version"] == 0
        assert data["fatal"] is False
        assert data["last_scan"]["snapshot_version"] == 1

    def test_status_fatal(self, xdg_home: Path) -> None:
        """A fatal marker is shown with its reason."""
        marker = get_fatal_marker_path()
        marker.parent.mkdir(parents=True, exist_ok=True)
        marker.write_text("rollback to version 1 failed\n")

        result = runner.invoke(app, ["status", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["fatal"] is True
        assert data["fatal_reason"] == "rollback to version 1 failed"

    def test_status_fatal_table(self, xdg_home: Path) -> None:
        """The human-readable status points at clear-fatal."""
        marker = get_fatal_marker_path()
        marker.parent.mkdir(parents=True, exist_ok=True)
        marker.write_text("rollback to version 1 failed\n")

        result = runner.invoke(app, ["status"])

        assert result.exit_code == 0
        assert "FATAL lock set" in result.output
        assert "clear-fatal" in result.stdout

    def test_status_unreadable_report(self, xdg_home: Path) -> None:
        """A corrupt report is warned about, not fatal."""
        report_path = get_last_scan_path()
        report_path.parent.mkdir(parents=True, exist_ok=True)
        report_path.write_text("{oops")

        result = runner.invoke(app, ["status"])

        assert result.exit_code == 0
        assert "Cannot read last scan report" in result.output

    def test_status_corrupt_store(self, xdg_home: Path) -> None:
        """A corrupt store exits with code 1."""
        store_path = get_store_path()
        store_path.parent.mkdir(parents=True, exist_ok=True)
        store_path.write_text("not json")

        result = runner.invoke(app, ["status"])

        assert result.exit_code == 1
        assert "Corrupt config store" in result.output
