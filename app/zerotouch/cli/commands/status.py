"""Status command implementation.

Shows the committed snapshot, the fatal lock and the last scan report.
"""

import json
from pathlib import Path
from typing import Annotated, Any

import typer

from zerotouch.cli.display import create_report_table, print_report_summary
from zerotouch.cli.types import get_settings, get_store
from zerotouch.core.paths import get_fatal_marker_path, get_last_scan_path
from zerotouch.models.report import ScanReport
from zerotouch.utils.formatting import console, print_error, print_info, print_warning

app = typer.Typer(
    help="Show deployment status.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def show_status(
    ctx: typer.Context,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Show the live snapshot version and the last scan report.

    Examples:
        zerotouch status            # Human-readable status
        zerotouch status --json     # JSON output for scripting
    """
    if ctx.invoked_subcommand is not None:
        return

    settings = get_settings(ctx)
    store = get_store()
    marker = get_fatal_marker_path()
    fatal_reason = _read_fatal_reason(marker) if marker.exists() else None

    try:
        report = ScanReport.load(get_last_scan_path())
    except (OSError, ValueError) as e:
        print_warning(f"Cannot read last scan report: {e}")
        report = None

    if json_output:
        lkg = store.last_known_good
        data: dict[str, Any] = {
            "campaigns_root": str(settings.campaigns_root),
            "config_path": str(settings.proxy.config_path),
            "snapshot_version": store.current.version,
            "content_hash": store.current.content_hash,
            "campaigns": store.current.names,
            "last_known_good_version": lkg.version if lkg is not None else None,
            "fatal": fatal_reason is not None,
            "fatal_reason": fatal_reason,
            "last_scan": report.to_dict() if report is not None else None,
        }
        console.print_json(json.dumps(data))
        return

    console.print("[bold]Deployment Status[/bold]")
    console.print(f"  Campaigns root: [muted]{settings.campaigns_root}[/muted]")
    console.print(f"  Live config: [muted]{settings.proxy.config_path}[/muted]")
    console.print(
        f"  Snapshot version: [info]{store.current.version}[/info] "
        f"({len(store.current.blocks)} campaign block(s))"
    )
    if store.last_known_good is not None:
        console.print(f"  Last-known-good: [muted]version {store.last_known_good.version}[/muted]")
    console.print()

    if fatal_reason is not None:
        print_error(f"FATAL lock set: {fatal_reason}")
        print_info("Fix the proxy manually, then run 'zerotouch clear-fatal'.")

    if report is None:
        print_info("No scan has run yet.")
        return

    console.print(f"[muted]Last scan: {report.metadata.timestamp}[/muted]")
    if report.campaigns:
        console.print(create_report_table(report))
    print_report_summary(report)


def _read_fatal_reason(marker_path: Path) -> str:
    try:
        return marker_path.read_text(encoding="utf-8").strip() or "unknown reason"
    except OSError:
        return "unknown reason"
