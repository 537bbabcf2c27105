"""Audit log records.

One HistoryEntry is written per configuration transition: a committed
apply, a snapshot the proxy rejected, a rollback, a fatal escalation, an
operator revert, and clearing the fatal lock. Each names the snapshot
version involved and the campaigns that snapshot contained.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from zerotouch.proxy.models import ConfigSnapshot


class HistoryActionType(str, Enum):
    """Kind of transition recorded.

    Attributes:
        APPLY: A new snapshot was validated, reloaded and committed.
        VALIDATION_FAILED: A snapshot failed the proxy syntax check.
        ROLLBACK: A reload failed and last-known-good was re-applied.
        FATAL: Rollback failed; automatic changes halted.
        FATAL_CLEARED: An operator cleared the fatal lock.
        REVERT: An operator reverted to last-known-good.
    """

    APPLY = "apply"
    VALIDATION_FAILED = "validation_failed"
    ROLLBACK = "rollback"
    FATAL = "fatal"
    FATAL_CLEARED = "fatal_cleared"
    REVERT = "revert"


@dataclass(frozen=True, slots=True)
class HistoryItem:
    """A campaign contained in the recorded snapshot."""

    name: str
    location: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            msg = "Campaign name cannot be empty"
            raise ValueError(msg)

    def to_dict(self) -> dict[str, Any]:
        if self.location is None:
            return {"name": self.name}
        return {"name": self.name, "location": self.location}


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """One line of the audit log.

    Attributes:
        id: 12-character hex identifier.
        timestamp: ISO 8601 time with offset.
        action_type: Kind of transition.
        snapshot_version: Snapshot version involved, if any.
        items: Campaigns in that snapshot, in assembly order.
        success: False for rejected, rolled back and fatal transitions.
        message: Diagnostics or failure cause.
        metadata: Extra context such as the snapshot's content hash.
    """

    id: str
    timestamp: str
    action_type: HistoryActionType
    snapshot_version: int | None
    items: tuple[HistoryItem, ...]
    success: bool = True
    message: str = ""
    metadata: dict[str, Any] = field(default_factory=lambda: {})

    def __post_init__(self) -> None:
        if not self.id:
            msg = "History entry ID cannot be empty"
            raise ValueError(msg)
        if not self.timestamp:
            msg = "Timestamp cannot be empty"
            raise ValueError(msg)

    @classmethod
    def for_snapshot(
        cls,
        action_type: HistoryActionType,
        snapshot: ConfigSnapshot,
        *,
        success: bool = True,
        message: str = "",
        metadata: dict[str, Any] | None = None,
    ) -> HistoryEntry:
        """Describe a transition involving ``snapshot``, stamped now.

        The snapshot's content hash is always included in the metadata.
        """
        return cls(
            id=uuid.uuid4().hex[:12],
            timestamp=datetime.now(UTC).isoformat(),
            action_type=action_type,
            snapshot_version=snapshot.version,
            items=tuple(HistoryItem(block.name, block.location) for block in snapshot.blocks),
            success=success,
            message=message,
            metadata={"content_hash": snapshot.content_hash, **(metadata or {})},
        )

    @property
    def occurred_at(self) -> datetime:
        """Timestamp as an aware datetime."""
        return datetime.fromisoformat(self.timestamp.replace("Z", "+00:00"))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "action_type": self.action_type.value,
            "snapshot_version": self.snapshot_version,
            "items": [item.to_dict() for item in self.items],
            "success": self.success,
            "message": self.message,
            "metadata": self.metadata,
        }

    def to_json_line(self) -> str:
        """Compact single-line JSON, without the trailing newline."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_json_line(cls, line: str) -> HistoryEntry:
        """Parse one audit log line.

        Only ``id``, ``timestamp`` and ``action_type`` are required.

        Raises:
            json.JSONDecodeError: If the line is not JSON.
            KeyError: If a required key is missing.
            ValueError: If the action type or an item is invalid.
        """
        data = json.loads(line)
        return cls(
            id=data["id"],
            timestamp=data["timestamp"],
            action_type=HistoryActionType(data["action_type"]),
            snapshot_version=data.get("snapshot_version"),
            items=tuple(
                HistoryItem(item["name"], item.get("location")) for item in data.get("items", [])
            ),
            success=data.get("success", True),
            message=data.get("message", ""),
            metadata=data.get("metadata", {}),
        )
