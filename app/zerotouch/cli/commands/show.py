"""Show command implementation.

Prints the assembled configuration held by the store.
"""

from typing import Annotated

import typer

from zerotouch.cli.types import get_store
from zerotouch.utils.formatting import console, print_info

app = typer.Typer(
    help="Show the assembled proxy configuration.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def show_config(
    ctx: typer.Context,
    previous: Annotated[
        bool,
        typer.Option(
            "--previous",
            "-p",
            help="Show the last-known-good snapshot instead of the current one.",
        ),
    ] = False,
) -> None:
    """Print the current (or last-known-good) configuration snapshot.

    The output is the exact text installed as the live configuration
    file, so it can be piped into other tools.

    Examples:
        zerotouch show               # Current snapshot
        zerotouch show --previous    # Last-known-good snapshot
    """
    if ctx.invoked_subcommand is not None:
        return

    store = get_store()
    snapshot = store.last_known_good if previous else store.current

    if snapshot is None:
        print_info("No last-known-good snapshot yet.")
        return

    console.print(
        f"# snapshot version {snapshot.version} ({snapshot.content_hash[:12]})",
        style="muted",
        highlight=False,
    )
    console.print(snapshot.text, markup=False, highlight=False, end="")
