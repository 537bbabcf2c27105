"""History command for viewing past configuration transitions.

This module provides the `zerotouch history` command for viewing the
audit log of applies, rollbacks and fatal escalations.
"""

import json
from datetime import datetime
from typing import Annotated

import typer
from rich.table import Table

from zerotouch.core.state import StateManager
from zerotouch.models.history import HistoryActionType, HistoryEntry
from zerotouch.utils.formatting import console, print_error, print_info

app = typer.Typer(
    name="history",
    help="View the configuration audit log.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def history(
    ctx: typer.Context,
    limit: Annotated[
        int,
        typer.Option(
            "--limit",
            "-n",
            help="Maximum number of entries to show.",
        ),
    ] = 20,
    since: Annotated[
        str | None,
        typer.Option(
            "--since",
            help="Show entries since date (YYYY-MM-DD).",
        ),
    ] = None,
    action: Annotated[
        HistoryActionType | None,
        typer.Option(
            "--action",
            "-a",
            help="Only show entries of this action type.",
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Show the audit log of configuration changes.

    Every apply, failed validation, rollback, revert and fatal
    escalation is recorded with the snapshot version and the campaigns
    it contained.

    Examples:
        zerotouch history              # Show last 20 entries
        zerotouch history -n 50        # Show last 50 entries
        zerotouch history --since 2026-01-01
        zerotouch history -a rollback  # Only rollbacks
        zerotouch history --json       # JSON output for scripting
    """
    if ctx.invoked_subcommand is not None:
        return

    since_parsed: datetime | None = None
    if since:
        try:
            since_parsed = datetime.fromisoformat(since)
        except ValueError:
            print_error(f"Invalid date format: {since}. Use YYYY-MM-DD.")
            raise typer.Exit(code=1) from None

    entries = StateManager().get_history(limit=limit, since=since_parsed, action_type=action)

    if not entries:
        print_info("No history entries found.")
        return

    if json_output:
        _print_json(entries)
    else:
        _print_table(entries)


def _print_table(entries: list[HistoryEntry]) -> None:
    """Print history as Rich table.

    Args:
        entries: List of history entries to display.
    """
    table = Table(
        title="Configuration History",
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("ID", style="dim")
    table.add_column("Timestamp", style="info")
    table.add_column("Action")
    table.add_column("Version", justify="right")
    table.add_column("Campaigns", style="text")
    table.add_column("Message", style="muted", overflow="fold")

    for entry in entries:
        count = len(entry.items)
        names = ", ".join(item.name for item in entry.items[:3])
        if count > 3:
            names += f" (+{count - 3} more)"

        style = "success" if entry.success else "error"
        table.add_row(
            entry.id[:8],
            entry.occurred_at.strftime("%Y-%m-%d %H:%M"),
            f"[{style}]{entry.action_type.value}[/{style}]",
            str(entry.snapshot_version) if entry.snapshot_version is not None else "-",
            names or "-",
            entry.message,
        )

    console.print(table)


def _print_json(entries: list[HistoryEntry]) -> None:
    """Print history as JSON for scripting."""
    output = [entry.to_dict() for entry in entries]
    console.print_json(json.dumps(output))
