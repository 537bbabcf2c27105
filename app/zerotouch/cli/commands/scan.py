"""Scan command implementation.

Runs one deployment cycle over the campaigns root.
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from zerotouch.cli.display import create_report_table, print_report_summary
from zerotouch.cli.types import OutputFormat, get_controller, get_settings
from zerotouch.core.errors import CampaignIOError, FatalFailure, StoreError
from zerotouch.utils.formatting import console, print_error

app = typer.Typer(
    help="Scan campaigns and deploy their proxy configuration.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def scan_campaigns(
    ctx: typer.Context,
    root: Annotated[
        Path | None,
        typer.Option(
            "--root",
            "-r",
            help="Campaigns root directory (default: from settings).",
        ),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            "-n",
            help="Show what would change without touching the proxy.",
        ),
    ] = False,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format: table or json.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
) -> None:
    """Scan the campaigns root and apply the resulting configuration.

    Each campaign directory is classified. Static and simple dynamic
    campaigns get a location block; everything else is skipped with a
    notice. The assembled configuration is validated, installed and
    reloaded, or rolled back if the proxy does not come back healthy.

    Examples:
        zerotouch scan                      # Scan and deploy
        zerotouch scan --dry-run            # Preview without reloading
        zerotouch scan --root /srv/www      # Scan another root
        zerotouch scan --format json        # JSON report for scripting
    """
    if ctx.invoked_subcommand is not None:
        return

    settings = get_settings(ctx)
    controller = get_controller(settings)

    try:
        report = controller.scan(root=root, dry_run=dry_run)
    except FatalFailure as e:
        print_error(f"FATAL: {e}")
        raise typer.Exit(code=2) from e
    except (CampaignIOError, StoreError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(report.to_dict()))
    else:
        if report.campaigns:
            console.print(create_report_table(report))
        else:
            console.print("[muted]No campaigns found.[/muted]")
        print_report_summary(report)

    if report.error:
        raise typer.Exit(code=1)
