"""Utility modules for zerotouch.

This module exports commonly used utility functions.
"""

from zerotouch.utils.files import write_json_atomic, write_text_atomic
from zerotouch.utils.formatting import (
    console,
    create_campaign_table,
    err_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from zerotouch.utils.shell import CommandResult, command_exists, run_command

__all__ = [
    "CommandResult",
    "command_exists",
    "console",
    "create_campaign_table",
    "err_console",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "run_command",
    "write_json_atomic",
    "write_text_atomic",
]
