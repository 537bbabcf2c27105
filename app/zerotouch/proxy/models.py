"""Config block and snapshot models.

Blocks and snapshots are immutable value objects. A regenerated block
supersedes the old one; a new assembly produces a new snapshot with a
higher version.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from zerotouch.campaigns.models import CampaignType

SNAPSHOT_HEADER = """\
# Generated by zerotouch. Do not edit: changes are overwritten on the next scan.
# Campaigns needing manual configuration are not listed here.
"""


def content_hash(text: str) -> str:
    """sha256 hex digest of a configuration text."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


@dataclass(frozen=True, slots=True)
class ConfigBlock:
    """Generated nginx directive block for one campaign.

    Attributes:
        name: Campaign name (unique key in the store).
        location: Sanitized location path segment.
        campaign_type: Verdict the block was derived from.
        text: Generated directive text.
        content_hash: sha256 of ``text``.
        generated_at: ISO 8601 generation time (not part of the hash).
    """

    name: str
    location: str
    campaign_type: CampaignType
    text: str
    content_hash: str
    generated_at: str

    def __post_init__(self) -> None:
        """Validate block data after initialization."""
        if not self.name:
            msg = "Campaign name cannot be empty"
            raise ValueError(msg)
        if not self.location:
            msg = "Location cannot be empty"
            raise ValueError(msg)

    @classmethod
    def create(
        cls, name: str, location: str, campaign_type: CampaignType, text: str
    ) -> ConfigBlock:
        """Create a block, hashing the text and stamping the current time."""
        return cls(
            name=name,
            location=location,
            campaign_type=campaign_type,
            text=text,
            content_hash=content_hash(text),
            generated_at=datetime.now(UTC).isoformat(),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "name": self.name,
            "location": self.location,
            "campaign_type": self.campaign_type.value,
            "text": self.text,
            "content_hash": self.content_hash,
            "generated_at": self.generated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConfigBlock:
        """Deserialize from dictionary.

        The hash is recomputed and must match the stored one.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If data is invalid or the hash does not match.
        """
        block = cls(
            name=data["name"],
            location=data["location"],
            campaign_type=CampaignType(data["campaign_type"]),
            text=data["text"],
            content_hash=data["content_hash"],
            generated_at=data["generated_at"],
        )
        if content_hash(block.text) != block.content_hash:
            msg = f"Content hash mismatch for block {block.name!r}"
            raise ValueError(msg)
        return block


@dataclass(frozen=True, slots=True)
class ConfigSnapshot:
    """Fully assembled proxy configuration at a point in time.

    Attributes:
        version: Monotonically increasing version (0 = empty baseline).
        blocks: Blocks in assembly order (sorted by campaign name).
        text: Header followed by every block's text.
        content_hash: sha256 of ``text``.
    """

    version: int
    blocks: tuple[ConfigBlock, ...]
    text: str
    content_hash: str

    @classmethod
    def assemble(cls, version: int, blocks: list[ConfigBlock]) -> ConfigSnapshot:
        """Assemble blocks into a snapshot.

        Blocks are sorted by campaign name, so equal working sets always
        produce byte-identical text whatever order they were staged in.
        """
        ordered = tuple(sorted(blocks, key=lambda block: block.name))
        text = SNAPSHOT_HEADER + "".join(f"\n{block.text}" for block in ordered)
        return cls(version=version, blocks=ordered, text=text, content_hash=content_hash(text))

    @classmethod
    def empty(cls) -> ConfigSnapshot:
        """The baseline snapshot with no campaign blocks."""
        return cls.assemble(0, [])

    @property
    def names(self) -> list[str]:
        """Campaign names in this snapshot."""
        return [block.name for block in self.blocks]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "version": self.version,
            "content_hash": self.content_hash,
            "blocks": [block.to_dict() for block in self.blocks],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConfigSnapshot:
        """Deserialize from dictionary, re-assembling the text.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If a block is invalid or the assembled hash
                differs from the stored one.
        """
        blocks = [ConfigBlock.from_dict(item) for item in data["blocks"]]
        snapshot = cls.assemble(int(data["version"]), blocks)
        stored_hash = data.get("content_hash")
        if stored_hash is not None and stored_hash != snapshot.content_hash:
            msg = f"Content hash mismatch for snapshot version {snapshot.version}"
            raise ValueError(msg)
        return snapshot
