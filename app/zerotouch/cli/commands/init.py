"""Init command implementation.

Writes a settings.toml with the built-in defaults.
"""

from pathlib import Path
from typing import Annotated

import typer

from zerotouch.core.errors import SettingsError
from zerotouch.core.paths import get_settings_path
from zerotouch.core.settings import DeploySettings, save_settings
from zerotouch.utils.formatting import (
    console,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from zerotouch.utils.shell import command_exists

app = typer.Typer(
    help="Write a default settings file.",
    invoke_without_command=True,
)


def _show_settings_summary(settings: DeploySettings, output_path: Path) -> None:
    """Display the key settings that will be written.

    Args:
        settings: The settings to summarize.
        output_path: Path where the settings will be saved.
    """
    frameworks = ", ".join(sorted(settings.markers.frameworks)) or "none"

    console.print()
    console.print("[bold]Settings Summary[/bold]")
    console.print(f"  Output: [muted]{output_path}[/muted]")
    console.print(f"  Campaigns root: [info]{settings.campaigns_root}[/info]")
    console.print(f"  Live config: [info]{settings.proxy.config_path}[/info]")
    console.print(f"  Validate: [muted]{' '.join(settings.proxy.validate_command)}[/muted]")
    console.print(f"  FastCGI upstream: [muted]{settings.proxy.fastcgi_pass}[/muted]")
    console.print(f"  Framework signatures: [muted]{frameworks}[/muted]")
    console.print()


@app.callback(invoke_without_command=True)
def init_settings(
    ctx: typer.Context,
    root: Annotated[
        Path | None,
        typer.Option(
            "--root",
            "-r",
            help="Campaigns root directory to store in the settings.",
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output path for the settings file.",
        ),
    ] = None,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite an existing settings file.",
        ),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            "-n",
            help="Show what would be created without writing files.",
        ),
    ] = False,
) -> None:
    """Create a settings file with the default markers and proxy commands.

    Edit the file afterwards to match the nginx layout of the host.

    Examples:
        zerotouch init                          # Default location
        zerotouch init --root /srv/campaigns    # Custom campaigns root
        zerotouch init --output ./zt.toml       # Custom path
        zerotouch init --force                  # Overwrite existing file
    """
    if ctx.invoked_subcommand is not None:
        return

    output_path = output or (ctx.obj or {}).get("config") or get_settings_path()

    if output_path.exists():
        if dry_run:
            print_warning(f"Settings file already exists: {output_path}")
            print_info("Would be overwritten with --force.")
        elif not force:
            print_error(f"Settings file already exists: {output_path}")
            print_info("Use --force to overwrite or specify a different path with --output.")
            raise typer.Exit(code=1)
        else:
            print_warning(f"Overwriting existing settings file: {output_path}")

    settings = DeploySettings()
    if root is not None:
        settings = settings.model_copy(update={"campaigns_root": root.resolve()})

    _show_settings_summary(settings, output_path)

    validator = settings.proxy.validate_command[0]
    if not command_exists(validator):
        print_warning(f"{validator} not found on PATH; scans will fail validation until it is.")

    if dry_run:
        print_info("[DRY-RUN] No files were written.")
        return

    try:
        saved_path = save_settings(settings, output_path)
    except SettingsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    print_success(f"Settings created: {saved_path}")
