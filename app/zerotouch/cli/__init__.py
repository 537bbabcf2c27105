"""CLI package for zerotouch.

This package contains the Typer application and all subcommands.
"""

from zerotouch.cli.main import app

__all__ = ["app"]
