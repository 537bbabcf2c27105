"""Clear-fatal command implementation.

Lifts the lock set when a rollback failed.
"""

from typing import Annotated

import typer

from zerotouch.cli.types import get_orchestrator, get_settings, get_store
from zerotouch.core.paths import get_fatal_marker_path
from zerotouch.utils.formatting import console, print_info, print_success

app = typer.Typer(
    help="Clear the fatal-failure lock.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def clear_fatal(
    ctx: typer.Context,
    yes: Annotated[
        bool,
        typer.Option(
            "--yes",
            "-y",
            help="Skip confirmation prompt.",
        ),
    ] = False,
) -> None:
    """Allow automatic changes again after a failed rollback.

    Only clear the lock once the proxy runs a known configuration again.

    Examples:
        zerotouch clear-fatal
        zerotouch clear-fatal -y
    """
    if ctx.invoked_subcommand is not None:
        return

    marker = get_fatal_marker_path()
    if not marker.exists():
        print_info("No fatal lock is set.")
        return

    reason = marker.read_text(encoding="utf-8").strip()
    console.print(f"[error]Fatal lock:[/error] {reason}")

    if not yes:
        confirm = typer.confirm("Has the proxy been repaired?")
        if not confirm:
            print_info("Cancelled.")
            return

    settings = get_settings(ctx)
    orchestrator = get_orchestrator(settings, get_store())
    orchestrator.clear_fatal()
    print_success("Fatal lock cleared; automatic changes are enabled.")
