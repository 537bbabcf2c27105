"""Unit tests for XDG file locations."""

import os
from collections.abc import Callable, Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from zerotouch.core.paths import (
    get_campaigns_state_path,
    get_config_dir,
    get_fatal_marker_path,
    get_last_scan_path,
    get_settings_path,
    get_state_dir,
    get_store_path,
)


@pytest.fixture
def bare_home(tmp_path: Path) -> Iterator[Path]:
    """HOME pointing at tmp_path with no XDG variables set."""
    env = {k: v for k, v in os.environ.items() if not k.startswith("XDG_")}
    env["HOME"] = str(tmp_path)
    with patch.dict(os.environ, env, clear=True):
        yield tmp_path


class TestDirectories:
    """Tests for the config and state directories."""

    def test_defaults_under_home(self, bare_home: Path) -> None:
        assert get_config_dir() == bare_home / ".config" / "zerotouch"
        assert get_state_dir() == bare_home / ".local" / "state" / "zerotouch"

    def test_xdg_overrides(self, xdg_home: Path) -> None:
        assert get_config_dir() == xdg_home / "xdg-config" / "zerotouch"
        assert get_state_dir() == xdg_home / "xdg-state" / "zerotouch"

    def test_empty_variable_counts_as_unset(self, bare_home: Path) -> None:
        with patch.dict(os.environ, {"XDG_STATE_HOME": ""}):
            assert get_state_dir() == bare_home / ".local" / "state" / "zerotouch"

    def test_nothing_is_created(self, bare_home: Path) -> None:
        """Resolving locations never touches the filesystem."""
        get_settings_path()
        get_store_path()

        assert list(bare_home.iterdir()) == []


class TestFiles:
    """Tests for the individual file locations."""

    def test_settings_in_config_dir(self, xdg_home: Path) -> None:
        assert get_settings_path() == get_config_dir() / "settings.toml"

    @pytest.mark.parametrize(
        ("getter", "filename"),
        [
            (get_store_path, "store.json"),
            (get_campaigns_state_path, "campaigns.json"),
            (get_last_scan_path, "last-scan.json"),
            (get_fatal_marker_path, "FATAL"),
        ],
    )
    def test_state_files(
        self, xdg_home: Path, getter: Callable[[], Path], filename: str
    ) -> None:
        assert getter() == xdg_home / "xdg-state" / "zerotouch" / filename
