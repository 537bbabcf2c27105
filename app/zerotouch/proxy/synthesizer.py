"""Config synthesizer: verdicts to nginx location blocks.

Only STATIC and DYNAMIC_SIMPLE campaigns get a block. Campaign names and
paths are never escaped into the output: anything that could break out
of the nginx grammar is rejected with SynthesisError instead.
"""

import logging
import re
from collections import defaultdict
from collections.abc import Iterable
from pathlib import Path

from zerotouch.campaigns.models import CampaignType, ClassificationVerdict
from zerotouch.core.errors import SynthesisError
from zerotouch.proxy.models import ConfigBlock

logger = logging.getLogger(__name__)

DEFAULT_FASTCGI_PASS = "unix:/var/run/php/php8.4-fpm.sock"

# Quotes, escapes, directive terminators, block braces, variables, comments
# and any control character (newlines included).
_UNSAFE_CHARS = re.compile(r"[\"'\\;{}$#\x00-\x1f\x7f]")
_NON_ALNUM_RUN = re.compile(r"[^a-z0-9]+")

_STATIC_BODY = """\
    index index.html index.htm;
    try_files $uri $uri/ =404;
"""

_DYNAMIC_BODY = """\
    index index.php index.html index.htm;
    try_files $uri $uri/ =404;

    location ~ \\.php$ {{
        fastcgi_pass {fastcgi_pass};
        include fastcgi_params;
        fastcgi_param SCRIPT_FILENAME $request_filename;
    }}
"""

_FRAMEWORK_BODY = """\
    try_files $uri $uri/ /index.php?$query_string;

    location ~ \\.php$ {{
        fastcgi_pass {fastcgi_pass};
        include fastcgi_params;
        fastcgi_param SCRIPT_FILENAME $request_filename;
    }}
"""


def sanitize_location(name: str) -> str:
    """Derive the location path segment from a campaign name.

    Lowercases the name and collapses every run of characters outside
    ``[a-z0-9]`` into a single ``-``; leading and trailing dashes are
    stripped. ``"My Campaign!"`` becomes ``"my-campaign"``.

    Raises:
        SynthesisError: If nothing usable is left.
    """
    location = _NON_ALNUM_RUN.sub("-", name.lower()).strip("-")
    if not location:
        raise SynthesisError(f"Campaign name {name!r} has no usable characters for a location")
    return location


def _check_safe(value: str, what: str) -> None:
    """Reject values that could break out of the configuration grammar."""
    match = _UNSAFE_CHARS.search(value)
    if match is not None:
        raise SynthesisError(
            f"{what} {value!r} contains unsafe character {match.group()!r}"
        )


def _format_root(document_root: str) -> str:
    if any(ch.isspace() for ch in document_root):
        return f'"{document_root}"'
    return document_root


def find_location_collisions(blocks: Iterable[ConfigBlock]) -> dict[str, list[str]]:
    """Group campaigns that claim the same location.

    Args:
        blocks: Candidate blocks.

    Returns:
        Mapping of location to the (sorted) campaign names sharing it,
        only for locations claimed by more than one campaign.
    """
    by_location: dict[str, set[str]] = defaultdict(set)
    for block in blocks:
        by_location[block.location].add(block.name)
    return {
        location: sorted(names) for location, names in by_location.items() if len(names) > 1
    }


class ConfigSynthesizer:
    """Produces nginx location blocks for deployable campaigns.

    Attributes:
        fastcgi_pass: Upstream for server-side scripts.
    """

    def __init__(self, fastcgi_pass: str = DEFAULT_FASTCGI_PASS) -> None:
        _check_safe(fastcgi_pass, "fastcgi_pass")
        if not fastcgi_pass or any(ch.isspace() for ch in fastcgi_pass):
            raise SynthesisError(f"Invalid fastcgi_pass upstream {fastcgi_pass!r}")
        self.fastcgi_pass = fastcgi_pass

    def synthesize(
        self,
        name: str,
        verdict: ClassificationVerdict,
        document_root: Path | str,
    ) -> ConfigBlock | None:
        """Generate the config block for a campaign.

        Args:
            name: Campaign name.
            verdict: Classification verdict for the campaign.
            document_root: Absolute path of the campaign directory.

        Returns:
            ConfigBlock for STATIC and DYNAMIC_SIMPLE campaigns, None for
            FRAMEWORK_LIKE and UNKNOWN ones (the caller retracts any
            previous block).

        Raises:
            SynthesisError: If the name or path is unsafe or the root is
                not absolute.
        """
        if not verdict.is_deployable:
            logger.debug("No block for %s (%s)", name, verdict.campaign_type.value)
            return None

        root = str(document_root)
        _check_safe(name, "Campaign name")
        _check_safe(root, "Document root")
        if not root.startswith("/"):
            raise SynthesisError(f"Document root must be absolute, got {root!r}")

        location = sanitize_location(name)
        campaign_type = verdict.campaign_type

        if campaign_type == CampaignType.DYNAMIC_SIMPLE:
            body = _DYNAMIC_BODY.format(fastcgi_pass=self.fastcgi_pass)
        else:
            body = _STATIC_BODY

        text = (
            f"# zerotouch campaign: {name} ({campaign_type.value})\n"
            f"location ^~ /{location}/ {{\n"
            f"    root {_format_root(root)};\n"
            f"{body}"
            "}\n"
        )
        return ConfigBlock.create(
            name=name, location=location, campaign_type=campaign_type, text=text
        )


    def suggest_manual_block(self, name: str, document_root: Path | str) -> str:
        """Draft a location block for a framework campaign.

        The draft serves the framework's ``public/`` directory and routes
        unmatched requests through its front controller. It is shown to
        the operator only and never staged: framework campaigns need
        routing and bootstrapping a generic block cannot guarantee.

        Raises:
            SynthesisError: If the name or path is unsafe.
        """
        root = str(Path(document_root) / "public")
        _check_safe(name, "Campaign name")
        _check_safe(root, "Document root")
        return (
            "# Add to the nginx configuration manually:\n"
            f"location ^~ /{sanitize_location(name)}/ {{\n"
            f"    root {_format_root(root)};\n"
            f"{_FRAMEWORK_BODY.format(fastcgi_pass=self.fastcgi_pass)}"
            "}\n"
        )
