"""CLI commands for zerotouch.

This package contains all subcommand implementations.
"""

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

__all__ = [
    "classify",
    "fatal",
    "history",
    "init",
    "revert",
    "scan",
    "show",
    "status",
    "watch",
]
