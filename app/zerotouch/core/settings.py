"""Deployment settings and their TOML persistence.

Settings live in ~/.config/zerotouch/settings.toml. Every section is
optional; a missing file yields the built-in defaults. Marker names used
by the classifier are part of the settings so new framework signatures
can be added without code changes:

    [markers.frameworks.symfony]
    directories = ["config", "src"]
    files = ["symfony.lock"]
"""

import tomllib
from pathlib import Path
from typing import Annotated, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from zerotouch.core.errors import SettingsError
from zerotouch.core.paths import get_settings_path
from zerotouch.utils.files import write_text_atomic


class FrameworkSignature(BaseModel):
    """Marker entries that identify one framework layout.

    Attributes:
        directories: Top-level directory names (e.g., "routes", "app").
        files: Top-level file names (e.g., "composer.json", "artisan").
    """

    model_config = ConfigDict(extra="forbid")

    directories: Annotated[
        list[str],
        Field(default_factory=list, description="Marker directory names"),
    ]
    files: Annotated[
        list[str],
        Field(default_factory=list, description="Marker (manifest) file names"),
    ]


def _default_frameworks() -> dict[str, FrameworkSignature]:
    return {
        "laravel": FrameworkSignature(
            directories=["routes", "app"],
            files=["composer.json", "artisan"],
        ),
    }


class MarkerSettings(BaseModel):
    """Names the structure classifier looks for.

    Attributes:
        entry_points: File names accepted as a campaign entry point.
        script_extensions: Extensions of server-side script files.
        passive_extensions: Extensions of files served as-is.
        public_dir: Directory used by frameworks as their web root.
        frameworks: Named framework signatures.
    """

    model_config = ConfigDict(extra="forbid")

    entry_points: list[str] = ["index.php", "index.html", "index.htm"]
    script_extensions: list[str] = [".php", ".phtml"]
    passive_extensions: list[str] = [
        ".html",
        ".htm",
        ".css",
        ".js",
        ".json",
        ".txt",
        ".xml",
        ".svg",
        ".png",
        ".jpg",
        ".jpeg",
        ".gif",
        ".webp",
        ".ico",
        ".woff",
        ".woff2",
        ".ttf",
        ".pdf",
        ".mp4",
        ".webm",
    ]
    public_dir: str = "public"
    frameworks: Annotated[
        dict[str, FrameworkSignature],
        Field(default_factory=_default_frameworks, description="Framework signatures"),
    ]

    @field_validator("script_extensions", "passive_extensions")
    @classmethod
    def normalize_extensions(cls, value: list[str]) -> list[str]:
        """Lowercase extensions and make sure they start with a dot."""
        return [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in value]


class ProxySettings(BaseModel):
    """How the nginx proxy is validated, reloaded and probed.

    ``{config}`` in ``validate_command`` is replaced by the path of the
    generated validation harness.

    Attributes:
        config_path: Live configuration file written by zerotouch.
        validate_command: Offline syntax check command.
        harness_dir: Directory the validation harness is written to.
            Relative includes (e.g. ``fastcgi_params``) resolve against
            it, so it should be the main nginx config directory.
        reload_command: Command sending a graceful reload. If None,
            SIGHUP is sent to the pid in ``pid_file``.
        pid_file: Master process pid file.
        fastcgi_pass: Upstream for server-side scripts.
        confirm_timeout_seconds: How long the process must stay alive
            after a reload.
        poll_interval_seconds: Liveness polling interval.
        command_timeout_seconds: Deadline for validate and reload commands.
    """

    model_config = ConfigDict(extra="forbid")

    config_path: Path = Path("/etc/nginx/snippets/zerotouch-campaigns.conf")
    validate_command: list[str] = ["nginx", "-t", "-q", "-c", "{config}"]
    harness_dir: Path = Path("/etc/nginx")
    reload_command: list[str] | None = None
    pid_file: Path = Path("/run/nginx.pid")
    fastcgi_pass: str = "unix:/var/run/php/php8.4-fpm.sock"
    confirm_timeout_seconds: Annotated[
        float,
        Field(gt=0, le=60, description="Liveness confirmation window (seconds)"),
    ] = 3.0
    poll_interval_seconds: Annotated[
        float,
        Field(gt=0, le=5, description="Liveness polling interval (seconds)"),
    ] = 0.25
    command_timeout_seconds: Annotated[
        float,
        Field(gt=0, le=300, description="Control command deadline (seconds)"),
    ] = 30.0


class ScanSettings(BaseModel):
    """Scan loop settings.

    Attributes:
        interval_seconds: Pause between cycles in watch mode.
        workers: Thread pool size for classification and synthesis.
    """

    model_config = ConfigDict(extra="forbid")

    interval_seconds: Annotated[float, Field(ge=1, le=86400)] = 30.0
    workers: Annotated[int, Field(ge=1, le=64)] = 4


class DeploySettings(BaseModel):
    """Top-level zerotouch settings.

    Attributes:
        campaigns_root: Directory whose subdirectories are campaigns.
        proxy: Proxy control settings.
        markers: Classifier marker names.
        scan: Scan loop settings.
    """

    model_config = ConfigDict(extra="forbid")

    campaigns_root: Path = Path("/var/www/campaigns")
    proxy: Annotated[ProxySettings, Field(default_factory=ProxySettings)]
    markers: Annotated[MarkerSettings, Field(default_factory=MarkerSettings)]
    scan: Annotated[ScanSettings, Field(default_factory=ScanSettings)]


def load_settings(path: Path | None = None) -> DeploySettings:
    """Load settings from a TOML file, falling back to defaults.

    Args:
        path: Settings file. If None, uses the default settings path.

    Returns:
        Validated DeploySettings. Defaults if the file does not exist.

    Raises:
        SettingsError: If the file cannot be read, parsed or validated.
    """
    settings_path = path or get_settings_path()

    if not settings_path.exists():
        return DeploySettings()

    try:
        with open(settings_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise SettingsError(f"Invalid TOML syntax in {settings_path}: {e}") from e
    except OSError as e:
        raise SettingsError(f"Failed to read settings: {e}") from e

    try:
        return DeploySettings.model_validate(data)
    except ValidationError as e:
        raise SettingsError(f"Invalid settings content: {e}") from e


def save_settings(settings: DeploySettings, path: Path | None = None) -> Path:
    """Save settings to a TOML file.

    The file is written atomically (temporary file plus rename).

    Args:
        settings: The settings to save.
        path: Target file. If None, uses the default settings path.

    Returns:
        Path where the settings were saved.

    Raises:
        SettingsError: If the file cannot be written.
    """
    settings_path = path or get_settings_path()

    try:
        return write_text_atomic(settings_path, tomli_w.dumps(_settings_to_dict(settings)))
    except OSError as e:
        raise SettingsError(f"Failed to write settings: {e}") from e


def _settings_to_dict(settings: DeploySettings) -> dict[str, Any]:
    """Convert settings to a TOML-serializable dictionary.

    TOML has no null, so unset optional values are dropped.
    """
    data = settings.model_dump(mode="json")
    if data["proxy"].get("reload_command") is None:
        data["proxy"].pop("reload_command", None)
    return data
