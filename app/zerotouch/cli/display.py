"""Shared Rich display functions for scan reports and verdicts.

Provides the table builders and summary printers used by the scan,
watch and status commands.
"""

from rich.table import Table

from zerotouch.campaigns.models import CampaignDirectory, ClassificationVerdict
from zerotouch.models.report import Outcome, ScanReport
from zerotouch.utils.formatting import (
    console,
    create_campaign_table,
    format_campaign_type,
    format_change,
    format_outcome,
    print_error,
    print_success,
    print_warning,
)


def create_report_table(report: ScanReport, show_unchanged: bool = True) -> Table:
    """Create a Rich table with one row per campaign of a report.

    Args:
        report: The scan report to display.
        show_unchanged: Whether to include campaigns that did not change.

    Returns:
        Rich Table configured for report display.
    """
    title = "Scan Report (Dry Run)" if report.metadata.dry_run else "Scan Report"
    table = create_campaign_table(title)

    for entry in report.campaigns:
        if not show_unchanged and entry.outcome is None:
            continue

        if entry.location:
            details = f"/{entry.location}/"
            if entry.reason:
                details += f" [muted]{entry.reason}[/muted]"
        else:
            details = f"[muted]{entry.reason}[/muted]" if entry.reason else ""

        table.add_row(
            entry.name,
            format_change(entry.change.value),
            format_campaign_type(entry.campaign_type),
            format_outcome(entry.outcome.value if entry.outcome else None),
            details,
        )

    return table


def print_report_summary(report: ScanReport) -> None:
    """Print the one-line outcome of a scan cycle.

    Args:
        report: The scan report to summarize.
    """
    if report.cancelled:
        print_warning("Scan cancelled; staged changes discarded.")
        return

    parts: list[str] = []
    counts = [
        (Outcome.COMMITTED, "success", "committed"),
        (Outcome.PLANNED, "info", "planned"),
        (Outcome.SKIPPED, "warning", "skipped"),
        (Outcome.FAILED, "error", "failed"),
    ]
    for outcome, style, label in counts:
        count = report.count(outcome)
        if count:
            parts.append(f"[{style}]{count} {label}[/{style}]")

    if parts:
        console.print(f"\nSummary: {', '.join(parts)}")

    if report.error:
        print_error(report.error)
    elif report.committed:
        print_success(f"Snapshot version {report.snapshot_version} is live.")
    elif report.metadata.dry_run and report.count(Outcome.PLANNED):
        console.print(
            f"[info]Would apply snapshot version {report.snapshot_version}.[/info]"
        )
    else:
        console.print(
            f"[muted]No configuration change (snapshot version {report.snapshot_version}).[/muted]"
        )


def print_verdict(directory: CampaignDirectory, verdict: ClassificationVerdict) -> None:
    """Print a classification verdict with its evidence.

    Args:
        directory: The snapshot that was classified.
        verdict: The classifier's verdict.
    """
    console.print(f"[bold]{directory.name}[/bold] [muted]{directory.path}[/muted]")
    console.print(f"  Type: {format_campaign_type(verdict.campaign_type.value)}")
    console.print(f"  Reason: [text]{verdict.reason}[/text]")
    console.print(f"  Rules fired: [info]{', '.join(verdict.evidence) or '-'}[/info]")
    console.print(f"  Markers: [muted]{', '.join(verdict.markers) or '-'}[/muted]")
