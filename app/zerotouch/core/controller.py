"""Scan controller: one deployment cycle over the campaigns root.

A cycle:

1. discovers campaign directories and snapshots them in parallel;
2. compares each snapshot's fingerprint with the previous scan;
3. classifies and synthesizes the affected campaigns in parallel;
4. resolves location collisions, then stages and retracts blocks;
5. assembles one snapshot and hands it to the reload orchestrator.

Only one cycle runs at a time. A scan requested while another runs
waits for it to finish.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from zerotouch.campaigns.classifier import classify
from zerotouch.campaigns.models import CampaignDirectory, CampaignType, ClassificationVerdict
from zerotouch.campaigns.scanner import CampaignScanner
from zerotouch.core.errors import (
    CampaignIOError,
    ClassificationAmbiguous,
    ConfigValidationError,
    FatalFailure,
    LocationCollisionError,
    ReloadError,
    StoreError,
    SynthesisError,
    ZeroTouchError,
)
from zerotouch.core.paths import get_campaigns_state_path, get_last_scan_path
from zerotouch.core.settings import DeploySettings
from zerotouch.models.report import (
    CampaignReport,
    ChangeType,
    Outcome,
    ScanMetadata,
    ScanReport,
)
from zerotouch.proxy.models import ConfigBlock
from zerotouch.proxy.orchestrator import ReloadOrchestrator
from zerotouch.proxy.store import ConfigStore
from zerotouch.proxy.synthesizer import ConfigSynthesizer, find_location_collisions
from zerotouch.utils.files import write_json_atomic

logger = logging.getLogger(__name__)

FRAMEWORK_NOTICE = "manual nginx configuration required"
UNKNOWN_NOTICE = "manual review required"


def skip_notice(verdict: ClassificationVerdict) -> str:
    """Build the operator notice for a campaign that gets no block.

    Example:
        "framework bootstrap structure detected (public-entry-point,
        laravel:routes/); manual nginx configuration required"
    """
    notice = (
        FRAMEWORK_NOTICE
        if verdict.campaign_type == CampaignType.FRAMEWORK_LIKE
        else UNKNOWN_NOTICE
    )
    evidence = ", ".join(verdict.markers or verdict.evidence)
    if evidence:
        return f"{verdict.reason} ({evidence}); {notice}"
    return f"{verdict.reason}; {notice}"


@dataclass(slots=True)
class _Evaluation:
    """Working record for one campaign during a cycle.

    Each record is filled by exactly one worker thread, then read by the
    cycle thread once all workers are done.
    """

    name: str
    path: Path
    change: ChangeType = ChangeType.UNCHANGED
    directory: CampaignDirectory | None = None
    verdict: ClassificationVerdict | None = None
    block: ConfigBlock | None = None
    outcome: Outcome | None = None
    reason: str = ""

    def to_report(self) -> CampaignReport:
        if self.verdict is not None and self.outcome is not None:
            return CampaignReport.from_verdict(
                self.name,
                self.change,
                self.outcome,
                self.verdict,
                reason=self.reason,
                location=self.block.location if self.block is not None else None,
            )
        return CampaignReport(
            name=self.name, change=self.change, outcome=self.outcome, reason=self.reason
        )


class ScanController:
    """Drives scan cycles and keeps the previous-scan state.

    Attributes:
        settings: Deployment settings.
        store: Config store holding the working set.
        orchestrator: Applies assembled snapshots.
        scanner: Produces campaign snapshots.
        synthesizer: Turns verdicts into config blocks.
        last_report: Report of the most recent cycle, if any.
    """

    def __init__(
        self,
        settings: DeploySettings,
        store: ConfigStore,
        orchestrator: ReloadOrchestrator,
        scanner: CampaignScanner | None = None,
        synthesizer: ConfigSynthesizer | None = None,
        *,
        state_path: Path | None = None,
        report_path: Path | None = None,
    ) -> None:
        self.settings = settings
        self.store = store
        self.orchestrator = orchestrator
        self.scanner = scanner if scanner is not None else CampaignScanner(settings.markers)
        self.synthesizer = (
            synthesizer
            if synthesizer is not None
            else ConfigSynthesizer(settings.proxy.fastcgi_pass)
        )
        self.state_path = state_path if state_path is not None else get_campaigns_state_path()
        self.report_path = report_path if report_path is not None else get_last_scan_path()
        self.last_report: ScanReport | None = None

        self._lock = threading.Lock()
        self._cancel = threading.Event()
        self._stop = threading.Event()
        self._seen = self._load_seen()

    # --- public API ---

    def scan(self, root: Path | None = None, dry_run: bool = False) -> ScanReport:
        """Run one scan cycle.

        Args:
            root: Campaigns root. Defaults to ``settings.campaigns_root``.
            dry_run: Assemble and report without applying anything.

        Returns:
            ScanReport of the cycle.

        Raises:
            CampaignIOError: If the campaigns root cannot be read.
            FatalFailure: If the orchestrator is halted or the rollback
                after a failed reload failed.
            StoreError: If a live snapshot could not be recorded.
        """
        with self._lock:
            # A cancel() issued between cycles does not carry over.
            self._cancel.clear()
            try:
                report = self._run_cycle(root or self.settings.campaigns_root, dry_run)
            finally:
                self._cancel.clear()
        return report

    def cancel(self) -> None:
        """Abandon the running cycle's staged changes before commit."""
        self._cancel.set()

    def stop(self) -> None:
        """Stop a ``watch`` loop, cancelling the running cycle."""
        self._stop.set()
        self._cancel.set()

    def watch(
        self,
        interval: float | None = None,
        cycles: int | None = None,
        on_report: Callable[[ScanReport], None] | None = None,
    ) -> int:
        """Scan periodically until stopped.

        Errors of a single cycle are logged and the loop continues;
        FatalFailure ends the loop.

        Args:
            interval: Seconds between cycles. Defaults to the settings.
            cycles: Stop after this many cycles. None runs until ``stop``.
            on_report: Called with each cycle's report.

        Returns:
            Number of cycles run.

        Raises:
            FatalFailure: If automatic changes were halted.
        """
        wait = interval if interval is not None else self.settings.scan.interval_seconds
        self._stop.clear()
        self._cancel.clear()
        count = 0
        while not self._stop.is_set():
            try:
                report = self.scan()
            except FatalFailure:
                raise
            except ZeroTouchError as e:
                logger.error("Scan cycle failed: %s", e)
            else:
                if on_report is not None:
                    on_report(report)
            count += 1
            if cycles is not None and count >= cycles:
                break
            if self._stop.wait(wait):
                break
        return count

    # --- cycle ---

    def _run_cycle(self, root: Path, dry_run: bool) -> ScanReport:
        metadata = ScanMetadata.create(root, dry_run)
        paths = list(self.scanner.discover(root))
        present = {path.name for path in paths}
        logger.debug("Discovered %d campaign(s) under %s", len(paths), root)

        with ThreadPoolExecutor(max_workers=self.settings.scan.workers) as pool:
            records = list(pool.map(self._inspect, paths))
            for record in records:
                record.change = self._detect_change(record)
            affected = [
                r for r in records if r.change != ChangeType.UNCHANGED and r.outcome is None
            ]
            list(pool.map(self._evaluate, affected))

        removed = [
            _Evaluation(name=name, path=root / name, change=ChangeType.REMOVED)
            for name in sorted((set(self._seen) | set(self.store.working_names)) - present)
        ]

        self._resolve_collisions(affected, removed)

        if self._cancel.is_set():
            return self._cancelled(metadata, records + removed)

        for record in removed:
            self.store.retract(record.name)
        for record in affected:
            self._stage(record)

        snapshot = self.store.assemble()
        if self._cancel.is_set():
            return self._cancelled(metadata, records + removed)

        pending = [r for r in affected if r.block is not None] + removed
        # Skipped campaigns whose live block this snapshot retracts. If the
        # apply fails they must be retried, like any other pending change.
        retracting = [
            r
            for r in affected
            if r.outcome == Outcome.SKIPPED and r.name in self.store.current.names
        ]
        committed = False
        error: str | None = None
        version = self.store.current.version

        if not self.store.has_changes(snapshot):
            self.store.discard()
            _settle(pending, Outcome.COMMITTED)
        elif dry_run:
            self.store.discard()
            version = snapshot.version
            _settle(pending, Outcome.PLANNED)
        else:
            try:
                self.orchestrator.apply(snapshot)
            except (ConfigValidationError, ReloadError) as e:
                self.store.discard()
                error = str(e)
                if isinstance(e, ConfigValidationError) and e.diagnostics:
                    logger.error("Proxy diagnostics:\n%s", e.diagnostics)
                _settle(pending + retracting, Outcome.FAILED, error)
            except FatalFailure as e:
                self.store.discard()
                _settle(pending + retracting, Outcome.FAILED, str(e))
                self._finish(metadata, records + removed, version, False, str(e), dry_run)
                raise
            else:
                committed = True
                version = snapshot.version
                _settle(pending, Outcome.COMMITTED)

        return self._finish(metadata, records + removed, version, committed, error, dry_run)

    def _inspect(self, path: Path) -> _Evaluation:
        record = _Evaluation(name=path.name, path=path)
        try:
            record.directory = self.scanner.snapshot(path)
        except CampaignIOError as e:
            logger.warning("Cannot read campaign %s: %s", path.name, e)
            record.outcome = Outcome.FAILED
            record.reason = str(e)
        return record

    def _detect_change(self, record: _Evaluation) -> ChangeType:
        previous = self._seen.get(record.name)
        if previous is None:
            return ChangeType.ADDED
        fingerprint = previous.get("fingerprint")
        if (
            record.directory is not None
            and fingerprint is not None
            and fingerprint == record.directory.fingerprint()
        ):
            return ChangeType.UNCHANGED
        return ChangeType.CHANGED

    def _evaluate(self, record: _Evaluation) -> _Evaluation:
        """Classify and synthesize one campaign (runs in a worker thread)."""
        if record.directory is None:
            return record
        try:
            verdict = classify(record.directory)
            record.verdict = verdict
            if verdict.campaign_type == CampaignType.UNKNOWN:
                raise ClassificationAmbiguous(skip_notice(verdict))
            if verdict.campaign_type == CampaignType.FRAMEWORK_LIKE:
                record.outcome = Outcome.SKIPPED
                record.reason = skip_notice(verdict)
                return record
            record.block = self.synthesizer.synthesize(
                record.name, verdict, record.directory.path
            )
        except (ClassificationAmbiguous, SynthesisError) as e:
            record.outcome = Outcome.SKIPPED
            record.reason = str(e)
        if record.outcome is not None:
            logger.info("Skipping campaign %s: %s", record.name, record.reason)
        return record

    def _resolve_collisions(
        self, affected: list[_Evaluation], removed: list[_Evaluation]
    ) -> None:
        """Fail every affected campaign whose location is claimed twice.

        Unaffected campaigns keep their live blocks.
        """
        touched = {r.name for r in affected} | {r.name for r in removed}
        candidates = [r.block for r in affected if r.block is not None]
        for name in self.store.working_names:
            block = self.store.get(name)
            if name not in touched and block is not None:
                candidates.append(block)

        by_name = {r.name: r for r in affected}
        for location, names in find_location_collisions(candidates).items():
            error = LocationCollisionError(location, names)
            for name in names:
                record = by_name.get(name)
                if record is not None and record.block is not None:
                    logger.warning("Campaign %s: %s", name, error)
                    record.block = None
                    record.outcome = Outcome.FAILED
                    record.reason = str(error)

    def _stage(self, record: _Evaluation) -> None:
        if record.block is not None:
            try:
                self.store.stage(record.block)
            except LocationCollisionError as e:
                record.block = None
                record.outcome = Outcome.FAILED
                record.reason = str(e)
        elif record.outcome == Outcome.SKIPPED:
            self.store.retract(record.name)

    def _cancelled(self, metadata: ScanMetadata, records: list[_Evaluation]) -> ScanReport:
        logger.warning("Scan cycle cancelled before commit; staged changes discarded")
        self.store.discard()
        report = ScanReport(
            metadata=metadata,
            campaigns=sorted((r.to_report() for r in records), key=lambda e: e.name),
            snapshot_version=self.store.current.version,
            cancelled=True,
        )
        self.last_report = report
        return report

    def _finish(
        self,
        metadata: ScanMetadata,
        records: list[_Evaluation],
        version: int,
        committed: bool,
        error: str | None,
        dry_run: bool,
    ) -> ScanReport:
        report = ScanReport(
            metadata=metadata,
            campaigns=sorted((r.to_report() for r in records), key=lambda e: e.name),
            snapshot_version=version,
            committed=committed,
            error=error,
        )
        self.last_report = report
        if dry_run:
            return report

        self._remember(records)
        try:
            report.save(self.report_path)
        except OSError as e:
            logger.warning("Failed to save scan report: %s", e)

        logger.info(
            "Scan of %s: %d campaign(s), snapshot version %d%s",
            metadata.root,
            len(report.campaigns),
            version,
            " (committed)" if committed else "",
        )
        return report

    # --- previous-scan state ---

    def _remember(self, records: list[_Evaluation]) -> None:
        """Record what this cycle saw.

        Failed campaigns keep their name with no fingerprint, so they
        count as changed (or removed) again on the next cycle.
        """
        for record in records:
            if record.outcome == Outcome.FAILED:
                self._seen[record.name] = {"fingerprint": None, "snapshot": None}
            elif record.change == ChangeType.REMOVED:
                self._seen.pop(record.name, None)
            elif record.directory is not None and record.change != ChangeType.UNCHANGED:
                self._seen[record.name] = {
                    "fingerprint": record.directory.fingerprint(),
                    "snapshot": record.directory.to_dict(),
                }
        try:
            write_json_atomic(self.state_path, {"campaigns": self._seen})
        except OSError as e:
            raise StoreError(f"Failed to write scan state {self.state_path}: {e}") from e

    def _load_seen(self) -> dict[str, dict[str, Any]]:
        if not self.state_path.exists():
            return {}
        try:
            data = json.loads(self.state_path.read_text(encoding="utf-8"))
            campaigns = data["campaigns"]
        except (OSError, json.JSONDecodeError, KeyError, TypeError) as e:
            logger.warning("Ignoring unreadable scan state %s: %s", self.state_path, e)
            return {}
        if not isinstance(campaigns, dict):
            logger.warning("Ignoring malformed scan state %s", self.state_path)
            return {}
        return campaigns


def _settle(records: list[_Evaluation], outcome: Outcome, reason: str = "") -> None:
    for record in records:
        record.outcome = outcome
        if reason:
            record.reason = reason
