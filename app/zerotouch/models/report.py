"""Scan report model for display and JSON export.

A ScanReport describes one scan cycle: what changed per campaign, what
happened to each affected campaign, and which snapshot (if any) went
live. The most recent report is kept in ``last-scan.json`` for the
``status`` command.
"""

from __future__ import annotations

import json
import socket
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

from zerotouch.campaigns.models import ClassificationVerdict
from zerotouch.utils.files import write_json_atomic


class ChangeType(str, Enum):
    """How a campaign changed since the previous scan."""

    UNCHANGED = "unchanged"
    ADDED = "added"
    REMOVED = "removed"
    CHANGED = "changed"


class Outcome(str, Enum):
    """What a scan did with an affected campaign.

    Attributes:
        COMMITTED: The campaign's block (or its retraction) is live.
        PLANNED: Dry run; the change would have been applied.
        SKIPPED: No block generated; the reason says why.
        FAILED: An error prevented the change; retried next scan.
    """

    COMMITTED = "committed"
    PLANNED = "planned"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class CampaignReport:
    """Per-campaign entry of a scan report.

    Attributes:
        name: Campaign directory name.
        change: Change since the previous scan.
        outcome: Result for affected campaigns, None when unchanged.
        reason: Skip notice or error message.
        campaign_type: Verdict type value, if classified.
        evidence: Rule names that fired.
        location: Location path of the generated block, if any.
    """

    name: str
    change: ChangeType
    outcome: Outcome | None = None
    reason: str = ""
    campaign_type: str | None = None
    evidence: tuple[str, ...] = ()
    location: str | None = None

    @classmethod
    def from_verdict(
        cls,
        name: str,
        change: ChangeType,
        outcome: Outcome,
        verdict: ClassificationVerdict,
        reason: str = "",
        location: str | None = None,
    ) -> CampaignReport:
        """Build an entry carrying a classification verdict."""
        return cls(
            name=name,
            change=change,
            outcome=outcome,
            reason=reason,
            campaign_type=verdict.campaign_type.value,
            evidence=verdict.evidence,
            location=location,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "change": self.change.value,
            "outcome": self.outcome.value if self.outcome is not None else None,
            "reason": self.reason,
            "type": self.campaign_type,
            "evidence": list(self.evidence),
            "location": self.location,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CampaignReport:
        outcome = data.get("outcome")
        return cls(
            name=data["name"],
            change=ChangeType(data["change"]),
            outcome=Outcome(outcome) if outcome is not None else None,
            reason=data.get("reason", ""),
            campaign_type=data.get("type"),
            evidence=tuple(data.get("evidence", [])),
            location=data.get("location"),
        )


@dataclass(frozen=True, slots=True)
class ScanMetadata:
    """Metadata for a scan report.

    Attributes:
        timestamp: ISO format timestamp when the scan started.
        hostname: Name of the machine that ran the scan.
        zerotouch_version: Version of zerotouch that ran the scan.
        root: Campaigns root that was scanned.
        dry_run: Whether the scan only planned changes.
    """

    timestamp: str
    hostname: str
    zerotouch_version: str
    root: str
    dry_run: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "timestamp": self.timestamp,
            "hostname": self.hostname,
            "zerotouch_version": self.zerotouch_version,
            "root": self.root,
            "dry_run": self.dry_run,
        }

    @classmethod
    def create(cls, root: Path, dry_run: bool = False) -> ScanMetadata:
        """Create metadata stamped with the current time and host."""
        from zerotouch import __version__

        return cls(
            timestamp=datetime.now(UTC).isoformat(),
            hostname=socket.gethostname(),
            zerotouch_version=__version__,
            root=str(root),
            dry_run=dry_run,
        )


@dataclass(frozen=True, slots=True)
class ScanReport:
    """Complete report of one scan cycle.

    Attributes:
        metadata: Scan metadata.
        campaigns: Per-campaign entries, sorted by name.
        snapshot_version: Version of the snapshot the cycle produced:
            the committed one, the planned one for a dry run, or the
            unchanged current one.
        committed: Whether a new snapshot went live.
        error: Cycle-level error (validation, reload, fatal), if any.
        cancelled: Whether the cycle was cancelled before commit.
    """

    metadata: ScanMetadata
    campaigns: list[CampaignReport] = field(default_factory=list)
    snapshot_version: int = 0
    committed: bool = False
    error: str | None = None
    cancelled: bool = False

    def count(self, outcome: Outcome) -> int:
        """Number of campaigns with the given outcome."""
        return sum(1 for entry in self.campaigns if entry.outcome == outcome)

    @property
    def summary(self) -> dict[str, int]:
        """Counts per change and per outcome, plus the total."""
        summary: dict[str, int] = {}
        for entry in self.campaigns:
            summary[entry.change.value] = summary.get(entry.change.value, 0) + 1
            if entry.outcome is not None:
                summary[entry.outcome.value] = summary.get(entry.outcome.value, 0) + 1
        summary["total"] = len(self.campaigns)
        return summary

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "metadata": self.metadata.to_dict(),
            "campaigns": [entry.to_dict() for entry in self.campaigns],
            "snapshot_version": self.snapshot_version,
            "committed": self.committed,
            "error": self.error,
            "cancelled": self.cancelled,
            "summary": self.summary,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScanReport:
        meta = data["metadata"]
        return cls(
            metadata=ScanMetadata(
                timestamp=meta["timestamp"],
                hostname=meta.get("hostname", ""),
                zerotouch_version=meta.get("zerotouch_version", ""),
                root=meta["root"],
                dry_run=meta.get("dry_run", False),
            ),
            campaigns=[CampaignReport.from_dict(entry) for entry in data.get("campaigns", [])],
            snapshot_version=data.get("snapshot_version", 0),
            committed=data.get("committed", False),
            error=data.get("error"),
            cancelled=data.get("cancelled", False),
        )

    def save(self, path: Path) -> Path:
        """Write the report as JSON (atomic)."""
        return write_json_atomic(path, self.to_dict())

    @classmethod
    def load(cls, path: Path) -> ScanReport | None:
        """Load a saved report.

        Returns:
            The report, or None if the file does not exist.

        Raises:
            ValueError: If the file is not a valid report.
        """
        if not path.exists():
            return None
        try:
            return cls.from_dict(json.loads(path.read_text(encoding="utf-8")))
        except (KeyError, TypeError) as e:
            raise ValueError(f"Invalid scan report {path}: {e}") from e
