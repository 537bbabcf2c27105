"""Watch command implementation.

Runs scan cycles periodically until interrupted.
"""

from typing import Annotated

import typer

from zerotouch.cli.display import create_report_table, print_report_summary
from zerotouch.cli.types import get_controller, get_settings
from zerotouch.core.errors import FatalFailure
from zerotouch.models.report import ScanReport
from zerotouch.utils.formatting import console, print_error, print_info

app = typer.Typer(
    help="Scan campaigns periodically.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def watch_campaigns(
    ctx: typer.Context,
    interval: Annotated[
        float | None,
        typer.Option(
            "--interval",
            "-i",
            min=1.0,
            help="Seconds between scans (default: from settings).",
        ),
    ] = None,
    cycles: Annotated[
        int | None,
        typer.Option(
            "--cycles",
            "-c",
            min=1,
            help="Stop after this many scans.",
        ),
    ] = None,
) -> None:
    """Watch the campaigns root and deploy changes as they appear.

    Only campaigns whose structure changed since the previous scan are
    reclassified. Stop with Ctrl+C.

    Examples:
        zerotouch watch                 # Scan every interval_seconds
        zerotouch watch -i 10           # Scan every 10 seconds
        zerotouch watch --cycles 3      # Run three scans and exit
    """
    if ctx.invoked_subcommand is not None:
        return

    settings = get_settings(ctx)
    controller = get_controller(settings)
    quiet = bool((ctx.obj or {}).get("quiet"))
    wait = interval if interval is not None else settings.scan.interval_seconds

    def _show(report: ScanReport) -> None:
        if quiet or not any(entry.outcome for entry in report.campaigns):
            return
        console.print(create_report_table(report, show_unchanged=False))
        print_report_summary(report)

    print_info(f"Watching {settings.campaigns_root} every {wait:g}s (Ctrl+C to stop)")

    try:
        count = controller.watch(interval=wait, cycles=cycles, on_report=_show)
    except FatalFailure as e:
        print_error(f"FATAL: {e}")
        raise typer.Exit(code=2) from e
    except KeyboardInterrupt:
        controller.stop()
        print_info("Stopped.")
        return

    print_info(f"Completed {count} scan(s).")
