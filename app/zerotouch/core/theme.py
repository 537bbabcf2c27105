"""Console theme for zerotouch.

Colors are read from the bundled ``data/theme.toml`` and merged, section
by section, with an optional user ``theme.toml`` in the config directory.
A user file that fails to parse or validate is ignored with a warning;
the bundled colors still apply.
"""

import functools
import logging
import tomllib
from importlib import resources
from pathlib import Path
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, ValidationError
from rich.theme import Theme

from zerotouch.campaigns.models import CampaignType
from zerotouch.core.paths import get_config_dir

logger = logging.getLogger(__name__)

HexColor = Annotated[
    str, StringConstraints(strip_whitespace=True, pattern=r"^#(?:[0-9a-fA-F]{3}){1,2}$")
]


class Palette(BaseModel):
    """Base and semantic colors shared by every command."""

    model_config = ConfigDict(extra="forbid")

    text: HexColor = "#ffffff"
    muted: HexColor = "#b2bec3"
    header: HexColor = "#69B9A1"
    border: HexColor = "#29526d"
    success: HexColor = "#03b971"
    warning: HexColor = "#f5b332"
    error: HexColor = "#f53263"
    info: HexColor = "#0ec1c8"


class ChangeColors(BaseModel):
    """Colors for campaign changes between scans."""

    model_config = ConfigDict(extra="forbid")

    added: HexColor = "#c1ff62"
    removed: HexColor = "#f53263"
    changed: HexColor = "#0e8ac8"


class CampaignColors(BaseModel):
    """One color per campaign type; field names match CampaignType values."""

    model_config = ConfigDict(extra="forbid")

    static: HexColor = "#69B9A1"
    dynamic_simple: HexColor = "#0ec1c8"
    framework_like: HexColor = "#f5b332"
    unknown: HexColor = "#d44ebc"


class ThemeColors(BaseModel):
    """Complete color configuration, one model per theme.toml section."""

    model_config = ConfigDict(extra="forbid")

    palette: Palette = Field(default_factory=Palette)
    changes: ChangeColors = Field(default_factory=ChangeColors)
    campaigns: CampaignColors = Field(default_factory=CampaignColors)


def get_user_theme_path() -> Path:
    """Path of the user override, ~/.config/zerotouch/theme.toml."""
    return get_config_dir() / "theme.toml"


def _parse_sections(text: str, source: str) -> dict[str, dict[str, Any]]:
    """Parse theme TOML into its tables.

    Top-level keys that are not tables are dropped with a warning.

    Raises:
        tomllib.TOMLDecodeError: If the text is not valid TOML.
    """
    sections: dict[str, dict[str, Any]] = {}
    for name, value in tomllib.loads(text).items():
        if isinstance(value, dict):
            sections[name] = value
        else:
            logger.warning("Ignoring non-table key %r in %s", name, source)
    return sections


def _read_user_sections(path: Path) -> dict[str, dict[str, Any]]:
    try:
        return _parse_sections(path.read_text(encoding="utf-8"), str(path))
    except FileNotFoundError:
        return {}
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring unreadable theme %s: %s", path, e)
        return {}


def _merge_sections(
    base: dict[str, dict[str, Any]], override: dict[str, dict[str, Any]]
) -> dict[str, dict[str, Any]]:
    merged = {name: dict(values) for name, values in base.items()}
    for name, values in override.items():
        merged.setdefault(name, {}).update(values)
    return merged


def load_theme(user_path: Path | None = None) -> ThemeColors:
    """Load the bundled theme with user overrides applied.

    Args:
        user_path: Override file; defaults to get_user_theme_path().

    Returns:
        Validated ThemeColors. If the overrides do not validate, the
        bundled colors alone are returned.
    """
    bundled_text = resources.files("zerotouch.data").joinpath("theme.toml").read_text(
        encoding="utf-8"
    )
    bundled = _parse_sections(bundled_text, "bundled theme")

    path = user_path if user_path is not None else get_user_theme_path()
    overrides = _read_user_sections(path)
    if not overrides:
        return ThemeColors.model_validate(bundled)

    logger.debug("Applying theme overrides from %s", path)
    try:
        return ThemeColors.model_validate(_merge_sections(bundled, overrides))
    except ValidationError as e:
        logger.warning("Invalid theme %s, using bundled colors: %s", path, e)
        return ThemeColors.model_validate(bundled)


def build_rich_theme(colors: ThemeColors) -> Theme:
    """Map theme colors to the style names used in console markup.

    Campaign types get ``campaign_<type>`` styles, e.g.
    ``[campaign_static]static[/]``.
    """
    palette = colors.palette
    styles: dict[str, str] = {
        "text": palette.text,
        "muted": palette.muted,
        "dim": palette.muted,
        "header": palette.header,
        "bold_header": f"bold {palette.header}",
        "border": palette.border,
        "success": palette.success,
        "warning": palette.warning,
        "error": f"bold {palette.error}",
        "info": palette.info,
        **colors.changes.model_dump(),
    }
    for campaign_type in CampaignType:
        color = getattr(colors.campaigns, campaign_type.value)
        # Framework campaigns always need an operator; make them stand out.
        if campaign_type is CampaignType.FRAMEWORK_LIKE:
            color = f"bold {color}"
        styles[f"campaign_{campaign_type.value}"] = color
    return Theme(styles)


@functools.cache
def get_theme() -> Theme:
    """Rich theme for the shared consoles, loaded once per process."""
    return build_rich_theme(load_theme())
