"""Audit log persistence.

Every configuration transition the reload orchestrator performs is
appended to ``history.jsonl`` in the state directory, one HistoryEntry
per line. The log is append-only; readers skip lines they cannot parse.
"""

import json
import logging
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path

from zerotouch.core.paths import HISTORY_FILE, get_state_dir
from zerotouch.models.history import HistoryActionType, HistoryEntry

logger = logging.getLogger(__name__)


class StateManager:
    """Append-only audit log of applies, rollbacks and fatal escalations.

    Storage location: ~/.local/state/zerotouch/history.jsonl
    """

    def __init__(self, state_dir: Path | None = None) -> None:
        self._state_dir = state_dir if state_dir is not None else get_state_dir()

    @property
    def history_path(self) -> Path:
        """Path to history.jsonl."""
        return self._state_dir / HISTORY_FILE

    def record_action(self, entry: HistoryEntry) -> None:
        """Append an entry to the log, creating the state directory if needed.

        Raises:
            OSError: If the file cannot be written.
        """
        self._state_dir.mkdir(parents=True, exist_ok=True)
        with self.history_path.open(mode="a", encoding="utf-8") as f:
            f.write(entry.to_json_line() + "\n")
            f.flush()
        logger.debug(
            "Recorded %s for snapshot version %s", entry.action_type.value, entry.snapshot_version
        )

    def get_history(
        self,
        limit: int | None = None,
        *,
        since: datetime | None = None,
        action_type: HistoryActionType | None = None,
    ) -> list[HistoryEntry]:
        """Read the log, newest first.

        Filters are applied before ``limit``, so ``limit`` counts matching
        entries only.

        Args:
            limit: Maximum number of entries to return; None for all.
            since: Earliest entry to include. A naive value is compared by
                calendar date only, an aware one by exact instant.
            action_type: Only return entries of this type.

        Returns:
            Matching entries, newest first. Empty if the log does not exist.
        """
        entries = [
            entry
            for entry in self._read_entries()
            if (action_type is None or entry.action_type == action_type)
            and (since is None or _is_since(entry, since))
        ]
        entries.reverse()
        return entries if limit is None else entries[:limit]

    def _read_entries(self) -> Iterator[HistoryEntry]:
        if not self.history_path.exists():
            return
        with self.history_path.open(encoding="utf-8") as f:
            for line_num, raw in enumerate(f, start=1):
                line = raw.strip()
                if not line:
                    continue
                try:
                    yield HistoryEntry.from_json_line(line)
                except (json.JSONDecodeError, KeyError, ValueError) as e:
                    logger.warning("Skipping corrupt history line %d: %s", line_num, e)


def _is_since(entry: HistoryEntry, since: datetime) -> bool:
    if since.tzinfo is None:
        return entry.timestamp[:10] >= since.date().isoformat()
    return entry.occurred_at >= since
