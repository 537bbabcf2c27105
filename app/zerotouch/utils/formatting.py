"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

import sys

from rich.console import Console
from rich.table import Table

from zerotouch.core.theme import get_theme


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def create_campaign_table(title: str = "Campaigns") -> Table:
    """Create a pre-configured table for displaying campaigns.

    Args:
        title: Table title.

    Returns:
        Rich Table with Campaign, Change, Type, Outcome and Details columns.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],  # Zebra striping for readability
    )
    table.add_column("Campaign", no_wrap=True)
    table.add_column("Change", width=10)
    table.add_column("Type", no_wrap=True)
    table.add_column("Outcome", width=10)
    table.add_column("Details", style="text", overflow="fold")
    return table


def format_campaign_type(campaign_type: str | None) -> str:
    """Format a campaign type value with its theme color."""
    if campaign_type is None:
        return "[muted]-[/]"
    return f"[campaign_{campaign_type}]{campaign_type}[/]"


_CHANGE_STYLES = {
    "added": "added",
    "removed": "removed",
    "changed": "changed",
    "unchanged": "muted",
}

_OUTCOME_STYLES = {
    "committed": "success",
    "planned": "info",
    "skipped": "warning",
    "failed": "error",
}


def format_change(change: str) -> str:
    """Format a change value (added, removed, ...) with markup."""
    style = _CHANGE_STYLES.get(change, "text")
    return f"[{style}]{change}[/]"


def format_outcome(outcome: str | None) -> str:
    """Format an outcome value (committed, failed, ...) with markup."""
    if outcome is None:
        return "[muted]-[/]"
    style = _OUTCOME_STYLES.get(outcome, "text")
    return f"[{style}]{outcome}[/]"


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
