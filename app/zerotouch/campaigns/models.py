"""Campaign domain models.

This module defines the immutable snapshot of a campaign directory taken
at scan time and the verdict the structure classifier derives from it.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from enum import Enum
from typing import Any


class CampaignType(str, Enum):
    """Structural judgment about a campaign directory.

    Attributes:
        STATIC: Only passive assets (HTML, CSS, JS, images).
        DYNAMIC_SIMPLE: A direct entry point plus server-side scripts.
        FRAMEWORK_LIKE: Framework layout that needs bootstrapping.
        UNKNOWN: No recognized entry point.
    """

    STATIC = "static"
    DYNAMIC_SIMPLE = "dynamic_simple"
    FRAMEWORK_LIKE = "framework_like"
    UNKNOWN = "unknown"

    @property
    def is_deployable(self) -> bool:
        """Whether a config block can be generated for this type."""
        return self in (CampaignType.STATIC, CampaignType.DYNAMIC_SIMPLE)


@dataclass(frozen=True, slots=True)
class CampaignDirectory:
    """Snapshot of one campaign directory's structure.

    Only the top level is recorded, plus the markers that need one more
    level (the ``public/`` entry point).

    Attributes:
        path: Absolute path to the campaign directory.
        name: Directory name (last path segment).
        entries: Names of all top-level entries.
        directories: Names of top-level directories.
        extensions: Lowercased extensions of top-level files.
        script_files: Top-level files with a server-side script extension.
        other_files: Top-level files that are neither scripts nor passive assets.
        entry_point: Name of the direct top-level entry point, if any.
        public_entry_point: Whether the public directory has an entry point.
        framework_markers: Observed markers as ``"<signature>:<entry>"``.
    """

    path: str
    name: str
    entries: frozenset[str]
    directories: frozenset[str]
    extensions: frozenset[str]
    script_files: frozenset[str]
    other_files: frozenset[str]
    entry_point: str | None
    public_entry_point: bool
    framework_markers: frozenset[str]

    def __post_init__(self) -> None:
        """Validate snapshot data after initialization."""
        if not self.name:
            msg = "Campaign name cannot be empty"
            raise ValueError(msg)
        if not self.path.startswith("/"):
            msg = f"Campaign path must be absolute, got {self.path!r}"
            raise ValueError(msg)

    @property
    def files(self) -> frozenset[str]:
        """Top-level entries that are not directories."""
        return self.entries - self.directories

    @property
    def is_empty(self) -> bool:
        """Whether the directory has no entries at all."""
        return not self.entries

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage.

        Sets are emitted sorted so that equal snapshots serialize identically.
        """
        return {
            "path": self.path,
            "name": self.name,
            "entries": sorted(self.entries),
            "directories": sorted(self.directories),
            "extensions": sorted(self.extensions),
            "script_files": sorted(self.script_files),
            "other_files": sorted(self.other_files),
            "entry_point": self.entry_point,
            "public_entry_point": self.public_entry_point,
            "framework_markers": sorted(self.framework_markers),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CampaignDirectory:
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If data is invalid.
        """
        return cls(
            path=data["path"],
            name=data["name"],
            entries=frozenset(data["entries"]),
            directories=frozenset(data["directories"]),
            extensions=frozenset(data["extensions"]),
            script_files=frozenset(data["script_files"]),
            other_files=frozenset(data.get("other_files", [])),
            entry_point=data.get("entry_point"),
            public_entry_point=bool(data.get("public_entry_point", False)),
            framework_markers=frozenset(data.get("framework_markers", [])),
        )

    def fingerprint(self) -> str:
        """Hash of the structural evidence, used for change detection."""
        payload = json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()


@dataclass(frozen=True, slots=True)
class ClassificationVerdict:
    """Result of classifying a campaign directory.

    Attributes:
        campaign_type: The structural verdict.
        evidence: Names of the rules that fired, in priority order.
        markers: Marker names observed in the directory.
        reason: Human-readable explanation, used in skip notices.
    """

    campaign_type: CampaignType
    evidence: tuple[str, ...]
    markers: tuple[str, ...]
    reason: str

    @property
    def is_deployable(self) -> bool:
        """Whether the verdict routes to config synthesis."""
        return self.campaign_type.is_deployable

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": self.campaign_type.value,
            "evidence": list(self.evidence),
            "markers": list(self.markers),
            "reason": self.reason,
        }
