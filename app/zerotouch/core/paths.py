"""XDG locations of zerotouch's files.

Settings and the theme override live in the config directory
(``$XDG_CONFIG_HOME/zerotouch``, default ``~/.config/zerotouch``).
Everything zerotouch writes while running lives in the state directory
(``$XDG_STATE_HOME/zerotouch``, default ``~/.local/state/zerotouch``):

    store.json       committed config store (current + last-known-good)
    campaigns.json   campaign snapshots from the previous scan
    last-scan.json   report of the most recent scan
    history.jsonl    audit log
    FATAL            fatal-failure marker; blocks automatic changes

Directories are not created here; every writer creates the parent of the
file it writes.
"""

import os
from pathlib import Path

APP_NAME = "zerotouch"

SETTINGS_FILE = "settings.toml"
STORE_FILE = "store.json"
CAMPAIGNS_FILE = "campaigns.json"
LAST_SCAN_FILE = "last-scan.json"
HISTORY_FILE = "history.jsonl"
FATAL_MARKER = "FATAL"


def _xdg_app_dir(env_var: str, fallback: str) -> Path:
    # An empty variable counts as unset.
    base = os.environ.get(env_var)
    root = Path(base) if base else Path.home() / fallback
    return root / APP_NAME


def get_config_dir() -> Path:
    """Directory for user-edited files (settings, theme override)."""
    return _xdg_app_dir("XDG_CONFIG_HOME", ".config")


def get_state_dir() -> Path:
    """Directory for files zerotouch maintains itself."""
    return _xdg_app_dir("XDG_STATE_HOME", ".local/state")


def get_settings_path() -> Path:
    """Default settings file, used when ``--config`` is not given."""
    return get_config_dir() / SETTINGS_FILE


def get_store_path() -> Path:
    return get_state_dir() / STORE_FILE


def get_campaigns_state_path() -> Path:
    return get_state_dir() / CAMPAIGNS_FILE


def get_last_scan_path() -> Path:
    return get_state_dir() / LAST_SCAN_FILE


def get_fatal_marker_path() -> Path:
    """Fatal-failure marker. While it exists no snapshot is applied."""
    return get_state_dir() / FATAL_MARKER
