"""Shared types and utilities for CLI commands.

This module provides the output format enum and the helpers that load
settings and wire up the store, proxy controller, orchestrator and scan
controller for a command.
"""

from enum import Enum
from pathlib import Path

import typer

from zerotouch.core.controller import ScanController
from zerotouch.core.errors import SettingsError, StoreError
from zerotouch.core.settings import DeploySettings, load_settings
from zerotouch.core.state import StateManager
from zerotouch.proxy.control import NginxController
from zerotouch.proxy.orchestrator import ReloadOrchestrator
from zerotouch.proxy.store import ConfigStore
from zerotouch.utils.formatting import print_error


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


def get_settings(ctx: typer.Context) -> DeploySettings:
    """Load settings from ``--config`` or the default location.

    Exits with code 1 on invalid settings.
    """
    obj = ctx.obj or {}
    config_path: Path | None = obj.get("config")
    try:
        return load_settings(config_path)
    except SettingsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def get_store() -> ConfigStore:
    """Load the config store, exiting with code 1 if it is corrupt."""
    try:
        return ConfigStore.load()
    except StoreError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def get_orchestrator(settings: DeploySettings, store: ConfigStore) -> ReloadOrchestrator:
    """Build an orchestrator driving the local nginx."""
    return ReloadOrchestrator(
        store,
        NginxController(settings.proxy),
        settings.proxy,
        history=StateManager(),
    )


def get_controller(settings: DeploySettings) -> ScanController:
    """Build a scan controller with the default state locations."""
    store = get_store()
    return ScanController(settings, store, get_orchestrator(settings, store))
