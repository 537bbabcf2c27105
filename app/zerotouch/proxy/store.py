"""Config store: staged working set and committed snapshots.

The store keeps three things:

- a working set of blocks keyed by campaign name, mutated by ``stage``
  and ``retract``;
- ``current``, the snapshot that passed validation and a live reload most
  recently;
- ``last_known_good``, the snapshot committed before ``current``.

Working-set changes never touch the committed snapshots. ``commit`` is
the only way a snapshot becomes current, and it is called by the reload
orchestrator only after a successful reload. Committed state is persisted
to ``store.json`` with write-to-temp plus ``os.replace``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from zerotouch.core.errors import LocationCollisionError, StoreError
from zerotouch.core.paths import get_store_path
from zerotouch.proxy.models import ConfigBlock, ConfigSnapshot
from zerotouch.utils.files import write_json_atomic

logger = logging.getLogger(__name__)


class ConfigStore:
    """Working set of config blocks plus the committed snapshot history.

    Attributes:
        path: File the committed snapshots are persisted to. If None,
            the store is memory-only.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        self._current = ConfigSnapshot.empty()
        self._last_known_good: ConfigSnapshot | None = None
        self._working: dict[str, ConfigBlock] = {}

    @classmethod
    def load(cls, path: Path | None = None) -> ConfigStore:
        """Load committed snapshots from disk.

        A missing file yields an empty store (version 0).

        Args:
            path: Store file. If None, uses the default store path.

        Raises:
            StoreError: If the file exists but cannot be read or is corrupt.
        """
        store_path = path or get_store_path()
        store = cls(store_path)

        if not store_path.exists():
            return store

        try:
            data = json.loads(store_path.read_text(encoding="utf-8"))
            store._current = ConfigSnapshot.from_dict(data["current"])
            lkg = data.get("last_known_good")
            store._last_known_good = ConfigSnapshot.from_dict(lkg) if lkg else None
        except OSError as e:
            raise StoreError(f"Failed to read config store {store_path}: {e}") from e
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise StoreError(f"Corrupt config store {store_path}: {e}") from e

        store._reset_working_set()
        logger.debug("Loaded config store version %d from %s", store._current.version, store_path)
        return store

    @property
    def current(self) -> ConfigSnapshot:
        """The committed snapshot (what the proxy is running)."""
        return self._current

    @property
    def last_known_good(self) -> ConfigSnapshot | None:
        """The snapshot committed before ``current``, if any."""
        return self._last_known_good

    @property
    def working_names(self) -> list[str]:
        """Campaign names in the working set, sorted."""
        return sorted(self._working)

    def get(self, name: str) -> ConfigBlock | None:
        """Return the working-set block for a campaign, if any."""
        return self._working.get(name)

    def stage(self, block: ConfigBlock) -> bool:
        """Add or replace a campaign's block in the working set.

        Args:
            block: Block to stage.

        Returns:
            True if the working set changed, False if an identical block
            (same content hash) was already staged.

        Raises:
            LocationCollisionError: If another campaign holds the location.
        """
        for other in self._working.values():
            if other.location == block.location and other.name != block.name:
                raise LocationCollisionError(block.location, [block.name, other.name])

        existing = self._working.get(block.name)
        if existing is not None and existing.content_hash == block.content_hash:
            return False

        self._working[block.name] = block
        return True

    def retract(self, name: str) -> bool:
        """Remove a campaign's block from the working set.

        Returns:
            True if a block was removed, False if none was staged.
        """
        return self._working.pop(name, None) is not None

    def assemble(self) -> ConfigSnapshot:
        """Assemble the working set into a new snapshot.

        Blocks are sorted by campaign name; the version is one above the
        current snapshot's.
        """
        return ConfigSnapshot.assemble(self._current.version + 1, list(self._working.values()))

    def has_changes(self, snapshot: ConfigSnapshot) -> bool:
        """Whether applying ``snapshot`` would change the live configuration."""
        return snapshot.content_hash != self._current.content_hash

    def commit(self, snapshot: ConfigSnapshot) -> None:
        """Make ``snapshot`` current and demote the old current.

        Any older last-known-good snapshot is discarded.

        Raises:
            StoreError: If the snapshot is not newer than current or the
                store file cannot be written.
        """
        if snapshot.version <= self._current.version:
            raise StoreError(
                f"Cannot commit version {snapshot.version}: "
                f"current is already {self._current.version}"
            )
        previous_current, previous_lkg = self._current, self._last_known_good
        self._last_known_good = self._current
        self._current = snapshot
        try:
            self.save()
        except StoreError:
            self._current, self._last_known_good = previous_current, previous_lkg
            raise
        self._reset_working_set()
        logger.info("Committed config snapshot version %d", snapshot.version)

    def rollback(self) -> ConfigSnapshot:
        """Discard staged changes and return the last-known-good live config.

        A snapshot that failed is never committed, so the last snapshot
        that passed validation and a live reload is ``current``. The
        working set is restored from it.

        Returns:
            The snapshot to re-apply.
        """
        self._reset_working_set()
        logger.info("Rolled back working set to version %d", self._current.version)
        return self._current

    def discard(self) -> None:
        """Drop staged changes (cancelled or failed cycle)."""
        self._reset_working_set()

    def revert_candidate(self) -> ConfigSnapshot:
        """Build a snapshot restoring last-known-good's blocks.

        The candidate gets the next version number so versions stay
        monotonic; it becomes current only once applied and committed.

        Raises:
            StoreError: If there is no last-known-good snapshot.
        """
        if self._last_known_good is None:
            raise StoreError("No last-known-good snapshot to revert to")
        return ConfigSnapshot.assemble(
            self._current.version + 1, list(self._last_known_good.blocks)
        )

    def save(self) -> None:
        """Persist committed snapshots atomically.

        Raises:
            StoreError: If the file cannot be written.
        """
        if self.path is None:
            return

        data = {
            "current": self._current.to_dict(),
            "last_known_good": (
                self._last_known_good.to_dict() if self._last_known_good is not None else None
            ),
        }

        try:
            write_json_atomic(self.path, data)
        except OSError as e:
            raise StoreError(f"Failed to write config store: {e}") from e

    def _reset_working_set(self) -> None:
        self._working = {block.name: block for block in self._current.blocks}
