"""Revert command for restoring the last-known-good configuration.

This module provides the `zerotouch revert` command, which re-applies
the snapshot committed before the current one.
"""

from typing import Annotated

import typer

from zerotouch.cli.types import get_orchestrator, get_settings, get_store
from zerotouch.core.errors import (
    ConfigValidationError,
    FatalFailure,
    ReloadError,
    StoreError,
)
from zerotouch.models.history import HistoryActionType
from zerotouch.proxy.models import ConfigSnapshot
from zerotouch.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    name="revert",
    help="Re-apply the last-known-good configuration.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def revert(
    ctx: typer.Context,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            "-n",
            help="Show what would be reverted without executing.",
        ),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option(
            "--yes",
            "-y",
            help="Skip confirmation prompt.",
        ),
    ] = False,
) -> None:
    """Re-apply the last-known-good snapshot and make it current.

    The restored blocks go through the full validate, reload and confirm
    protocol under a new snapshot version. Campaigns are not rescanned;
    a campaign that changes afterwards is redeployed by the next scan.

    Examples:
        zerotouch revert              # Revert with confirmation
        zerotouch revert --dry-run    # Preview only
        zerotouch revert -y           # Skip confirmation
    """
    if ctx.invoked_subcommand is not None:
        return

    settings = get_settings(ctx)
    store = get_store()

    try:
        candidate = store.revert_candidate()
    except StoreError as e:
        print_info(str(e))
        return

    _show_revert_preview(store.current, candidate)

    if dry_run:
        print_info("[DRY-RUN] No changes made.")
        return

    if not yes:
        confirm = typer.confirm("Do you want to revert to this configuration?")
        if not confirm:
            print_info("Cancelled.")
            return

    orchestrator = get_orchestrator(settings, store)
    try:
        orchestrator.apply(candidate, action_type=HistoryActionType.REVERT)
    except FatalFailure as e:
        print_error(f"FATAL: {e}")
        raise typer.Exit(code=2) from e
    except ConfigValidationError as e:
        print_error(str(e))
        if e.diagnostics:
            console.print(e.diagnostics, markup=False, highlight=False)
        raise typer.Exit(code=1) from e
    except (ReloadError, StoreError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Reverted: snapshot version {candidate.version} is live.")


def _show_revert_preview(current: ConfigSnapshot, candidate: ConfigSnapshot) -> None:
    """Display which campaign blocks a revert adds and removes.

    Args:
        current: The live snapshot.
        candidate: The snapshot that would replace it.
    """
    current_names = set(current.names)
    candidate_names = set(candidate.names)

    console.print(
        f"\n[bold]Revert: version {current.version} -> {candidate.version}[/bold]"
    )
    for name in sorted(candidate_names - current_names):
        console.print(f"  [added]+ {name}[/added]")
    for name in sorted(current_names - candidate_names):
        console.print(f"  [removed]- {name}[/removed]")
    changed = [
        block.name
        for block in candidate.blocks
        if block.name in current_names
        and block.content_hash != _hash_of(current, block.name)
    ]
    for name in changed:
        console.print(f"  [changed]~ {name}[/changed]")
    if candidate.content_hash == current.content_hash:
        console.print("  [muted]Configuration text is identical.[/muted]")
    console.print()


def _hash_of(snapshot: ConfigSnapshot, name: str) -> str | None:
    for block in snapshot.blocks:
        if block.name == name:
            return block.content_hash
    return None
