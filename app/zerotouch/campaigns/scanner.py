"""Campaign directory scanner.

Walks the campaigns root and takes an immutable structural snapshot of
each campaign. Only the top level of a campaign is read, plus the public
directory's entry point, so a snapshot stays cheap even for large
campaigns with many assets.
"""

import logging
from collections.abc import Iterator
from pathlib import Path

from zerotouch.campaigns.models import CampaignDirectory
from zerotouch.core.errors import CampaignIOError
from zerotouch.core.settings import MarkerSettings

logger = logging.getLogger(__name__)


def _is_hidden(entry: Path) -> bool:
    return entry.name.startswith(".")


class CampaignScanner:
    """Takes structural snapshots of campaign directories.

    Attributes:
        markers: Marker names deciding entry points, script extensions
            and framework signatures.
    """

    def __init__(self, markers: MarkerSettings | None = None) -> None:
        self.markers = markers if markers is not None else MarkerSettings()

    def discover(self, root: Path) -> Iterator[Path]:
        """Yield campaign directories under the campaigns root.

        Immediate, non-hidden subdirectories are campaigns; files and
        hidden entries are ignored. Results are sorted by name.

        Args:
            root: The campaigns root directory.

        Yields:
            Absolute path of each campaign directory.

        Raises:
            CampaignIOError: If the root is missing or unreadable.
        """
        if not root.is_dir():
            raise CampaignIOError(f"Campaigns root is not a directory: {root}")

        try:
            entries = sorted(root.resolve().iterdir())
        except OSError as e:
            raise CampaignIOError(f"Cannot read campaigns root {root}: {e}") from e

        for entry in entries:
            if _is_hidden(entry):
                continue
            if entry.is_dir():
                yield entry
            else:
                logger.debug("Ignoring non-directory entry in campaigns root: %s", entry)

    def snapshot(self, path: Path) -> CampaignDirectory:
        """Take a structural snapshot of one campaign directory.

        Args:
            path: Campaign directory.

        Returns:
            Immutable CampaignDirectory.

        Raises:
            CampaignIOError: If the directory (or its public directory)
                cannot be read.
        """
        campaign = path.resolve()

        try:
            children = [entry for entry in campaign.iterdir() if not _is_hidden(entry)]
        except OSError as e:
            raise CampaignIOError(f"Cannot read campaign directory {campaign}: {e}") from e

        directories = frozenset(entry.name for entry in children if entry.is_dir())
        files = [entry.name for entry in children if entry.name not in directories]

        script_extensions = set(self.markers.script_extensions)
        extensions = frozenset(
            Path(name).suffix.lower() for name in files if Path(name).suffix
        )
        script_files = frozenset(
            name for name in files if Path(name).suffix.lower() in script_extensions
        )
        known_extensions = script_extensions | set(self.markers.passive_extensions)
        other_files = frozenset(
            name for name in files if Path(name).suffix.lower() not in known_extensions
        )

        return CampaignDirectory(
            path=str(campaign),
            name=campaign.name,
            entries=frozenset(entry.name for entry in children),
            directories=directories,
            extensions=extensions,
            script_files=script_files,
            other_files=other_files,
            entry_point=self._find_entry_point(files),
            public_entry_point=self._has_public_entry_point(campaign, directories),
            framework_markers=self._find_framework_markers(directories, set(files)),
        )

    def _find_entry_point(self, files: list[str]) -> str | None:
        """Return the first configured entry point present among files."""
        present = set(files)
        for candidate in self.markers.entry_points:
            if candidate in present:
                return candidate
        return None

    def _has_public_entry_point(self, campaign: Path, directories: frozenset[str]) -> bool:
        """Check whether the public directory contains an entry point.

        Raises:
            CampaignIOError: If the public directory cannot be read.
        """
        if self.markers.public_dir not in directories:
            return False

        public = campaign / self.markers.public_dir
        try:
            names = {entry.name for entry in public.iterdir() if entry.is_file()}
        except OSError as e:
            raise CampaignIOError(f"Cannot read public directory {public}: {e}") from e

        return any(candidate in names for candidate in self.markers.entry_points)

    def _find_framework_markers(
        self, directories: frozenset[str], files: set[str]
    ) -> frozenset[str]:
        """Collect framework markers as ``"<signature>:<entry>"`` strings.

        Directory markers carry a trailing slash (``"laravel:routes/"``).
        """
        found: set[str] = set()
        for signature_name, signature in self.markers.frameworks.items():
            for directory in signature.directories:
                if directory in directories:
                    found.add(f"{signature_name}:{directory}/")
            for filename in signature.files:
                if filename in files:
                    found.add(f"{signature_name}:{filename}")
        return frozenset(found)
