"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.logging import RichHandler

from zerotouch import __version__
from zerotouch.cli.commands import (
    classify,
    fatal,
    history,
    init,
    revert,
    scan,
    show,
    status,
    watch,
)
from zerotouch.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="zerotouch",
    help="Zero-touch nginx deployment for campaign directories.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"zerotouch version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Route log records to stderr through Rich.

    Args:
        verbose: Log at DEBUG level.
        quiet: Log errors only.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=verbose, markup=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Settings file (default: ~/.config/zerotouch/settings.toml).",
            dir_okay=False,
        ),
    ] = None,
) -> None:
    """zerotouch - Zero-touch nginx deployment for campaign directories.

    Drop a campaign into the campaigns root and zerotouch classifies it,
    generates its nginx location block, validates and reloads nginx, and
    rolls back if nginx does not come back healthy.
    """
    configure_logging(verbose=verbose, quiet=quiet)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config"] = config


# Register commands
app.add_typer(scan.app, name="scan")
app.add_typer(watch.app, name="watch")
app.add_typer(status.app, name="status")
app.command(name="classify")(classify.classify_campaign)
app.add_typer(show.app, name="show")
app.add_typer(revert.app, name="revert")
app.add_typer(fatal.app, name="clear-fatal")
app.add_typer(history.app, name="history")
app.add_typer(init.app, name="init")


if __name__ == "__main__":
    app()
