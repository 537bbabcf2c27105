"""Reload orchestrator: validate, install, reload, confirm, roll back.

The protocol for one snapshot:

1. write the snapshot next to the live file (``<live>.staged``);
2. run the proxy's offline check on a harness config including it;
3. atomically rename the staged file over the live file;
4. send a graceful reload;
5. confirm the proxy stays alive for a bounded window.

A failed check leaves the live file untouched. A failed reload or
confirmation re-installs the last-known-good snapshot through the same
protocol; if that fails too the orchestrator turns FATAL and refuses
further changes until an operator clears the fatal marker.

States and legal transitions are an explicit table (``TRANSITIONS``).
"""

import logging
import os
import shutil
import time
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from zerotouch.core.errors import (
    ConfigValidationError,
    FatalFailure,
    ReloadError,
    StoreError,
)
from zerotouch.core.paths import get_fatal_marker_path
from zerotouch.core.settings import ProxySettings
from zerotouch.core.state import StateManager
from zerotouch.models.history import HistoryActionType, HistoryEntry
from zerotouch.proxy.control import ProxyController
from zerotouch.proxy.models import ConfigSnapshot
from zerotouch.proxy.store import ConfigStore

logger = logging.getLogger(__name__)

HARNESS_FILENAME = "zerotouch-check.conf"

_HARNESS_TEMPLATE = """\
# zerotouch validation harness (generated, safe to delete)
events {{}}
http {{
    server {{
        include "{staged}";
    }}
}}
"""


class ReloadState(str, Enum):
    """Orchestrator state.

    Attributes:
        IDLE: No transition in flight.
        VALIDATING: Offline syntax check running.
        VALIDATION_FAILED: Check failed; live config untouched.
        APPLYING: Staged file being installed over the live file.
        CONFIRMING: Reload sent, liveness being confirmed.
        ROLLING_BACK: Re-installing last-known-good.
        FATAL: Rollback failed; no further automatic changes.
    """

    IDLE = "idle"
    VALIDATING = "validating"
    VALIDATION_FAILED = "validation_failed"
    APPLYING = "applying"
    CONFIRMING = "confirming"
    ROLLING_BACK = "rolling_back"
    FATAL = "fatal"


TRANSITIONS: dict[ReloadState, frozenset[ReloadState]] = {
    ReloadState.IDLE: frozenset({ReloadState.VALIDATING}),
    ReloadState.VALIDATING: frozenset({ReloadState.APPLYING, ReloadState.VALIDATION_FAILED}),
    ReloadState.VALIDATION_FAILED: frozenset({ReloadState.IDLE}),
    ReloadState.APPLYING: frozenset({ReloadState.CONFIRMING, ReloadState.IDLE}),
    ReloadState.CONFIRMING: frozenset({ReloadState.IDLE, ReloadState.ROLLING_BACK}),
    ReloadState.ROLLING_BACK: frozenset({ReloadState.IDLE, ReloadState.FATAL}),
    ReloadState.FATAL: frozenset({ReloadState.IDLE}),
}


class _InstallFailed(Exception):
    """Internal: one protocol step failed (carries the step's diagnostics)."""

    def __init__(self, step: str, detail: str) -> None:
        self.step = step
        self.detail = detail
        super().__init__(f"{step} failed: {detail}")


class ReloadOrchestrator:
    """Applies config snapshots to the live proxy with rollback.

    Attributes:
        store: Config store committed to after a successful reload.
        proxy: Proxy controller used for check, reload and liveness.
        settings: Proxy settings (live path, timeouts).
    """

    def __init__(
        self,
        store: ConfigStore,
        proxy: ProxyController,
        settings: ProxySettings | None = None,
        *,
        history: StateManager | None = None,
        fatal_marker: Path | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.store = store
        self.proxy = proxy
        self.settings = settings if settings is not None else ProxySettings()
        self._history = history if history is not None else StateManager()
        self._fatal_marker = fatal_marker if fatal_marker is not None else get_fatal_marker_path()
        self._sleep = sleep
        self._state = ReloadState.FATAL if self._fatal_marker.exists() else ReloadState.IDLE

    @property
    def state(self) -> ReloadState:
        """Current orchestrator state."""
        return self._state

    @property
    def is_fatal(self) -> bool:
        """Whether automatic changes are halted."""
        return self._state == ReloadState.FATAL or self._fatal_marker.exists()

    @property
    def live_path(self) -> Path:
        return self.settings.config_path

    @property
    def staged_path(self) -> Path:
        return self.live_path.with_name(self.live_path.name + ".staged")

    @property
    def backup_path(self) -> Path:
        return self.live_path.with_name(self.live_path.name + ".bak")

    def apply(
        self,
        snapshot: ConfigSnapshot,
        action_type: HistoryActionType = HistoryActionType.APPLY,
    ) -> None:
        """Validate, install, reload and confirm a snapshot, then commit it.

        Args:
            snapshot: Assembled snapshot to make live.
            action_type: History action recorded on success (APPLY, or
                REVERT for an operator revert).

        Raises:
            FatalFailure: If halted by an earlier fatal failure, or if the
                rollback after a failed reload failed.
            ConfigValidationError: If the proxy rejected the snapshot; the
                live configuration is unchanged.
            ReloadError: If the reload or confirmation failed; the
                last-known-good snapshot was re-applied.
            StoreError: If the snapshot went live but could not be
                recorded in the store.
        """
        if self.is_fatal:
            raise FatalFailure(
                f"Automatic changes halted after a failed rollback; "
                f"inspect the proxy and remove {self._fatal_marker} (zerotouch clear-fatal)"
            )

        self._transition(ReloadState.VALIDATING)
        try:
            self._stage_and_validate(snapshot)
        except _InstallFailed as e:
            self._transition(ReloadState.VALIDATION_FAILED)
            self._record(
                HistoryActionType.VALIDATION_FAILED, snapshot, success=False, message=e.detail
            )
            self._transition(ReloadState.IDLE)
            raise ConfigValidationError(
                f"Snapshot version {snapshot.version} rejected by the proxy", e.detail
            ) from e

        self._transition(ReloadState.APPLYING)
        try:
            self._install_staged()
        except _InstallFailed as e:
            self._transition(ReloadState.IDLE)
            raise ReloadError(str(e), "not needed, live configuration untouched") from e

        self._transition(ReloadState.CONFIRMING)
        try:
            self._reload_and_confirm()
        except _InstallFailed as e:
            cause = str(e)
            logger.error("Snapshot version %d failed after install: %s", snapshot.version, cause)
            self._roll_back(snapshot, cause)

        try:
            self.store.commit(snapshot)
        except StoreError:
            self._transition(ReloadState.IDLE)
            raise
        self._record(action_type, snapshot)
        self._transition(ReloadState.IDLE)
        logger.info("Snapshot version %d is live", snapshot.version)

    def clear_fatal(self) -> bool:
        """Clear the fatal lock after manual intervention.

        Returns:
            True if a fatal lock was cleared, False if none was set.
        """
        was_fatal = self.is_fatal
        self._fatal_marker.unlink(missing_ok=True)
        if self._state == ReloadState.FATAL:
            self._transition(ReloadState.IDLE)
        if was_fatal:
            self._record(HistoryActionType.FATAL_CLEARED, self.store.current)
        return was_fatal

    def _roll_back(self, failed: ConfigSnapshot, cause: str) -> None:
        """Re-install last-known-good after a failed reload.

        Always raises: ReloadError when the rollback worked, FatalFailure
        when it did not.
        """
        self._transition(ReloadState.ROLLING_BACK)
        target = self.store.rollback()
        try:
            self._stage_and_validate(target)
            self._install_staged()
            self._reload_and_confirm()
        except _InstallFailed as e:
            outcome = f"rollback to version {target.version} failed: {e}"
            self._enter_fatal(target, f"{cause}; {outcome}")
            raise FatalFailure(f"{cause}; {outcome}") from e

        outcome = f"restored version {target.version}"
        self._record(
            HistoryActionType.ROLLBACK,
            failed,
            success=False,
            message=cause,
            metadata={"restored_version": target.version},
        )
        self._transition(ReloadState.IDLE)
        raise ReloadError(cause, outcome)

    def _enter_fatal(self, target: ConfigSnapshot, message: str) -> None:
        logger.critical("FATAL: %s", message)
        try:
            self._fatal_marker.parent.mkdir(parents=True, exist_ok=True)
            self._fatal_marker.write_text(message + "\n", encoding="utf-8")
        except OSError as e:
            logger.error("Cannot write fatal marker %s: %s", self._fatal_marker, e)
        self._record(HistoryActionType.FATAL, target, success=False, message=message)
        self._transition(ReloadState.FATAL)

    def _stage_and_validate(self, snapshot: ConfigSnapshot) -> None:
        """Write the staged file and run the offline check on it.

        The staged file is removed again if the check fails.
        """
        harness = self.settings.harness_dir / HARNESS_FILENAME
        try:
            self.staged_path.parent.mkdir(parents=True, exist_ok=True)
            self.staged_path.write_text(snapshot.text, encoding="utf-8")
            harness.parent.mkdir(parents=True, exist_ok=True)
            harness.write_text(
                _HARNESS_TEMPLATE.format(staged=self.staged_path), encoding="utf-8"
            )
        except OSError as e:
            self.staged_path.unlink(missing_ok=True)
            raise _InstallFailed("staging", str(e)) from e

        try:
            result = self.proxy.validate(harness)
        finally:
            harness.unlink(missing_ok=True)

        if not result.success:
            self.staged_path.unlink(missing_ok=True)
            raise _InstallFailed("validation", result.output or f"exit code {result.returncode}")

    def _install_staged(self) -> None:
        """Back up the live file, then rename the staged file over it."""
        try:
            if self.live_path.exists():
                shutil.copy2(self.live_path, self.backup_path)
            os.replace(self.staged_path, self.live_path)
        except OSError as e:
            self.staged_path.unlink(missing_ok=True)
            raise _InstallFailed("install", str(e)) from e

    def _reload_and_confirm(self) -> None:
        result = self.proxy.reload()
        if not result.success:
            raise _InstallFailed("reload", result.output or f"exit code {result.returncode}")
        alive = self.proxy.confirm(
            timeout=self.settings.confirm_timeout_seconds,
            interval=self.settings.poll_interval_seconds,
            sleep=self._sleep,
        )
        if not alive:
            raise _InstallFailed(
                "confirm",
                f"proxy not running within {self.settings.confirm_timeout_seconds}s of reload",
            )

    def _transition(self, new_state: ReloadState) -> None:
        if new_state not in TRANSITIONS[self._state]:
            msg = f"Illegal reload state transition {self._state.value} -> {new_state.value}"
            raise RuntimeError(msg)
        logger.debug("Reload state %s -> %s", self._state.value, new_state.value)
        self._state = new_state

    def _record(
        self,
        action_type: HistoryActionType,
        snapshot: ConfigSnapshot,
        *,
        success: bool = True,
        message: str = "",
        metadata: dict[str, object] | None = None,
    ) -> None:
        """Append an audit entry. Failures are logged, never raised."""
        entry = HistoryEntry.for_snapshot(
            action_type, snapshot, success=success, message=message, metadata=metadata
        )
        try:
            self._history.record_action(entry)
        except OSError as e:
            logger.warning("Failed to record %s to history: %s", action_type.value, e)
