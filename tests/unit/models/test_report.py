"""Unit tests for scan report models."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from zerotouch import __version__
from zerotouch.campaigns.models import CampaignType, ClassificationVerdict
from zerotouch.models.report import (
    CampaignReport,
    ChangeType,
    Outcome,
    ScanMetadata,
    ScanReport,
)


@pytest.fixture
def metadata() -> ScanMetadata:
    """Fixed scan metadata."""
    return ScanMetadata(
        timestamp="2026-03-01T09:00:00+00:00",
        hostname="edge-01",
        zerotouch_version="0.3.0",
        root="/var/www/campaigns",
    )


@pytest.fixture
def report(metadata: ScanMetadata) -> ScanReport:
    """A committed report with added, removed and unchanged campaigns."""
    return ScanReport(
        metadata=metadata,
        campaigns=[
            CampaignReport(
                name="spring-sale",
                change=ChangeType.ADDED,
                outcome=Outcome.COMMITTED,
                campaign_type="static",
                evidence=("direct-entry-point",),
                location="spring-sale",
            ),
            CampaignReport(
                name="shop",
                change=ChangeType.ADDED,
                outcome=Outcome.SKIPPED,
                reason="manual nginx configuration required",
                campaign_type="framework_like",
            ),
            CampaignReport(name="old-promo", change=ChangeType.REMOVED, outcome=Outcome.COMMITTED),
            CampaignReport(name="stable", change=ChangeType.UNCHANGED),
        ],
        snapshot_version=3,
        committed=True,
    )


class TestCampaignReport:
    """Tests for CampaignReport."""

    def test_from_verdict(self) -> None:
        """from_verdict copies type and evidence from the verdict."""
        verdict = ClassificationVerdict(
            campaign_type=CampaignType.DYNAMIC_SIMPLE,
            evidence=("direct-entry-point",),
            markers=("entry-point:index.php",),
            reason="direct entry point found",
        )

        entry = CampaignReport.from_verdict(
            "promo", ChangeType.CHANGED, Outcome.PLANNED, verdict, location="promo"
        )

        assert entry.campaign_type == "dynamic_simple"
        assert entry.evidence == ("direct-entry-point",)
        assert entry.location == "promo"
        assert entry.reason == ""

    def test_to_dict_unchanged(self) -> None:
        """Unchanged entries serialize a null outcome."""
        assert CampaignReport(name="stable", change=ChangeType.UNCHANGED).to_dict() == {
            "name": "stable",
            "change": "unchanged",
            "outcome": None,
            "reason": "",
            "type": None,
            "evidence": [],
            "location": None,
        }

    def test_from_dict_invalid_outcome(self) -> None:
        """from_dict rejects unknown outcomes."""
        with pytest.raises(ValueError):
            CampaignReport.from_dict({"name": "x", "change": "added", "outcome": "deployed"})


class TestScanMetadata:
    """Tests for ScanMetadata."""

    def test_create(self) -> None:
        """create stamps time, host and version."""
        with patch("zerotouch.models.report.socket.gethostname", return_value="edge-01"):
            metadata = ScanMetadata.create(Path("/srv/campaigns"), dry_run=True)

        assert metadata.hostname == "edge-01"
        assert metadata.zerotouch_version == __version__
        assert metadata.root == "/srv/campaigns"
        assert metadata.dry_run is True
        assert metadata.timestamp.endswith("+00:00")


class TestScanReport:
    """Tests for ScanReport."""

    def test_count(self, report: ScanReport) -> None:
        """count tallies entries by outcome."""
        assert report.count(Outcome.COMMITTED) == 2
        assert report.count(Outcome.SKIPPED) == 1
        assert report.count(Outcome.FAILED) == 0

    def test_summary(self, report: ScanReport) -> None:
        """summary counts changes and outcomes."""
        assert report.summary == {
            "added": 2,
            "removed": 1,
            "unchanged": 1,
            "committed": 2,
            "skipped": 1,
            "total": 4,
        }

    def test_to_dict(self, report: ScanReport) -> None:
        """to_dict includes metadata, entries and the summary."""
        data = report.to_dict()

        assert data["metadata"]["hostname"] == "edge-01"
        assert data["snapshot_version"] == 3
        assert data["committed"] is True
        assert data["cancelled"] is False
        assert data["error"] is None
        assert len(data["campaigns"]) == 4
        assert data["summary"]["total"] == 4
        json.dumps(data)

    def test_save_and_load(self, report: ScanReport, tmp_path: Path) -> None:
        """A saved report loads back equal."""
        path = tmp_path / "state" / "last-scan.json"

        report.save(path)

        assert ScanReport.load(path) == report

    def test_load_missing(self, tmp_path: Path) -> None:
        """load returns None when there is no report yet."""
        assert ScanReport.load(tmp_path / "last-scan.json") is None

    def test_load_invalid_json(self, tmp_path: Path) -> None:
        """load raises ValueError on malformed JSON."""
        path = tmp_path / "last-scan.json"
        path.write_text("{oops")

        with pytest.raises(ValueError):
            ScanReport.load(path)

    def test_load_missing_fields(self, tmp_path: Path) -> None:
        """load raises ValueError when required fields are missing."""
        path = tmp_path / "last-scan.json"
        path.write_text(json.dumps({"campaigns": []}))

        with pytest.raises(ValueError, match="Invalid scan report"):
            ScanReport.load(path)
