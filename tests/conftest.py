"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules: campaign
directory builders, a scripted stand-in for nginx and fully wired
store, orchestrator and scan controller instances rooted in tmp_path.
"""

import os
import re
from collections.abc import Callable, Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from zerotouch.campaigns.models import CampaignType
from zerotouch.core.controller import ScanController
from zerotouch.core.paths import get_store_path
from zerotouch.core.settings import DeploySettings, ProxySettings
from zerotouch.core.state import StateManager
from zerotouch.proxy.control import ProxyController
from zerotouch.proxy.models import ConfigBlock
from zerotouch.proxy.orchestrator import ReloadOrchestrator
from zerotouch.proxy.store import ConfigStore
from zerotouch.utils.shell import CommandResult

_INCLUDE = re.compile(r'include "(?P<path>[^"]+)";')

SAMPLE_STATIC_FILES = {
    "index.php": "<?php include 'data.php'; ?>\n",
    "data.php": "<?php $offers = []; ?>\n",
    "contact.php": "<?php mail('x', 'y', 'z'); ?>\n",
    "assets/css/style.css": "body { margin: 0; }\n",
    "assets/js/app.js": "console.log('hi');\n",
    "assets/images/banner.png": "PNG",
}

SAMPLE_LARAVEL_FILES = {
    "public/index.php": "<?php require __DIR__.'/../bootstrap/app.php';\n",
    "app/Http/Kernel.php": "<?php\n",
    "routes/web.php": "<?php\n",
    "config/app.php": "<?php return [];\n",
    "database/migrations/.gitkeep": "",
    "composer.json": '{"require": {"laravel/framework": "^11.0"}}\n',
}


def build_campaign(root: Path, name: str, files: dict[str, str]) -> Path:
    """Create a campaign directory with the given relative files.

    Keys ending in "/" create empty directories.
    """
    campaign = root / name
    campaign.mkdir(parents=True, exist_ok=True)
    for relative, content in files.items():
        target = campaign / relative
        if relative.endswith("/"):
            target.mkdir(parents=True, exist_ok=True)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return campaign


class FakeProxy(ProxyController):
    """Scripted nginx stand-in.

    ``valid``, ``reload_ok`` and ``alive`` are either booleans or
    callables. ``valid`` receives the staged configuration text;
    ``reload_ok`` and ``alive`` receive the number of reloads so far.
    """

    def __init__(self) -> None:
        self.valid: bool | Callable[[str], bool] = True
        self.reload_ok: bool | Callable[[int], bool] = True
        self.alive: bool | Callable[[int], bool] = True
        self.validated: list[str] = []
        self.reloads = 0

    def validate(self, config_path: Path) -> CommandResult:
        harness = config_path.read_text(encoding="utf-8")
        match = _INCLUDE.search(harness)
        assert match is not None, harness
        staged = Path(match.group("path")).read_text(encoding="utf-8")
        self.validated.append(staged)

        ok = self.valid(staged) if callable(self.valid) else self.valid
        if ok:
            return CommandResult(stdout="", stderr="", returncode=0)
        return CommandResult(
            stdout="", stderr='nginx: [emerg] unexpected "}" in zerotouch.conf:3', returncode=1
        )

    def reload(self) -> CommandResult:
        self.reloads += 1
        ok = self.reload_ok(self.reloads) if callable(self.reload_ok) else self.reload_ok
        if ok:
            return CommandResult(stdout="", stderr="", returncode=0)
        return CommandResult(stdout="", stderr="kill: no such process", returncode=1)

    def is_running(self) -> bool:
        return self.alive(self.reloads) if callable(self.alive) else self.alive


@pytest.fixture
def campaigns_root(tmp_path: Path) -> Path:
    """Empty campaigns root directory."""
    root = tmp_path / "campaigns"
    root.mkdir()
    return root


@pytest.fixture
def make_campaign(campaigns_root: Path) -> Callable[[str, dict[str, str]], Path]:
    """Factory creating a campaign directory under the campaigns root."""

    def _make(name: str, files: dict[str, str]) -> Path:
        return build_campaign(campaigns_root, name, files)

    return _make


@pytest.fixture
def static_campaign(campaigns_root: Path) -> Path:
    """The sample static campaign: PHP entry point plus assets."""
    return build_campaign(campaigns_root, "sample-static-campaign", SAMPLE_STATIC_FILES)


@pytest.fixture
def laravel_campaign(campaigns_root: Path) -> Path:
    """The sample Laravel campaign: public/index.php plus framework layout."""
    return build_campaign(campaigns_root, "sample-laravel-campaign", SAMPLE_LARAVEL_FILES)


@pytest.fixture
def state_dir(tmp_path: Path) -> Path:
    """State directory for store, history and scan state."""
    path = tmp_path / "state"
    path.mkdir()
    return path


@pytest.fixture
def deploy_settings(tmp_path: Path, campaigns_root: Path) -> DeploySettings:
    """Settings with every proxy path inside tmp_path."""
    nginx_dir = tmp_path / "nginx"
    (nginx_dir / "snippets").mkdir(parents=True)
    return DeploySettings(
        campaigns_root=campaigns_root,
        proxy=ProxySettings(
            config_path=nginx_dir / "snippets" / "zerotouch-campaigns.conf",
            harness_dir=nginx_dir,
            pid_file=tmp_path / "nginx.pid",
            confirm_timeout_seconds=1.0,
            poll_interval_seconds=0.25,
        ),
    )


@pytest.fixture
def xdg_home(tmp_path: Path) -> Iterator[Path]:
    """Point the XDG config and state directories into tmp_path."""
    with patch.dict(
        os.environ,
        {
            "XDG_CONFIG_HOME": str(tmp_path / "xdg-config"),
            "XDG_STATE_HOME": str(tmp_path / "xdg-state"),
        },
    ):
        yield tmp_path


@pytest.fixture
def proxy() -> FakeProxy:
    """A healthy fake proxy; tests flip its attributes to inject failures."""
    return FakeProxy()


@pytest.fixture
def store(state_dir: Path) -> ConfigStore:
    """Empty persistent config store."""
    return ConfigStore(state_dir / "store.json")


@pytest.fixture
def history(state_dir: Path) -> StateManager:
    """Audit history in the state directory."""
    return StateManager(state_dir=state_dir)


@pytest.fixture
def orchestrator(
    store: ConfigStore,
    proxy: FakeProxy,
    deploy_settings: DeploySettings,
    history: StateManager,
    state_dir: Path,
) -> ReloadOrchestrator:
    """Orchestrator wired to the fake proxy, with a no-op sleep."""
    return ReloadOrchestrator(
        store,
        proxy,
        deploy_settings.proxy,
        history=history,
        fatal_marker=state_dir / "FATAL",
        sleep=lambda _seconds: None,
    )


@pytest.fixture
def controller(
    deploy_settings: DeploySettings,
    store: ConfigStore,
    orchestrator: ReloadOrchestrator,
    state_dir: Path,
) -> ScanController:
    """Scan controller with state files in the state directory."""
    return ScanController(
        deploy_settings,
        store,
        orchestrator,
        state_path=state_dir / "campaigns.json",
        report_path=state_dir / "last-scan.json",
    )


@pytest.fixture
def committed_store(xdg_home: Path) -> ConfigStore:
    """Store at the default XDG path with one committed campaign block."""
    store = ConfigStore(get_store_path())
    store.stage(
        ConfigBlock.create(
            name="spring-sale",
            location="spring-sale",
            campaign_type=CampaignType.STATIC,
            text="location ^~ /spring-sale/ {\n    root /srv/spring-sale;\n}\n",
        )
    )
    store.commit(store.assemble())
    return store
