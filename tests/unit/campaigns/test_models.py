"""Unit tests for campaign models."""

from dataclasses import replace

import pytest
from zerotouch.campaigns.models import CampaignDirectory, CampaignType, ClassificationVerdict


@pytest.fixture
def directory() -> CampaignDirectory:
    """A small dynamic campaign snapshot."""
    return CampaignDirectory(
        path="/srv/campaigns/spring-sale",
        name="spring-sale",
        entries=frozenset({"index.php", "data.php", "assets"}),
        directories=frozenset({"assets"}),
        extensions=frozenset({".php"}),
        script_files=frozenset({"index.php", "data.php"}),
        other_files=frozenset(),
        entry_point="index.php",
        public_entry_point=False,
        framework_markers=frozenset(),
    )


class TestCampaignType:
    """Tests for CampaignType enum."""

    @pytest.mark.parametrize(
        ("campaign_type", "deployable"),
        [
            (CampaignType.STATIC, True),
            (CampaignType.DYNAMIC_SIMPLE, True),
            (CampaignType.FRAMEWORK_LIKE, False),
            (CampaignType.UNKNOWN, False),
        ],
    )
    def test_is_deployable(self, campaign_type: CampaignType, deployable: bool) -> None:
        """Only static and simple dynamic campaigns get a config block."""
        assert campaign_type.is_deployable is deployable

    def test_values(self) -> None:
        """Types serialize to lowercase strings."""
        assert CampaignType.DYNAMIC_SIMPLE.value == "dynamic_simple"
        assert CampaignType("framework_like") == CampaignType.FRAMEWORK_LIKE


class TestCampaignDirectory:
    """Tests for CampaignDirectory dataclass."""

    def test_empty_name_raises(self, directory: CampaignDirectory) -> None:
        """CampaignDirectory with empty name raises ValueError."""
        with pytest.raises(ValueError, match="Campaign name cannot be empty"):
            replace(directory, name="")

    def test_relative_path_raises(self, directory: CampaignDirectory) -> None:
        """CampaignDirectory requires an absolute path."""
        with pytest.raises(ValueError, match="must be absolute"):
            replace(directory, path="campaigns/spring-sale")

    def test_is_frozen(self, directory: CampaignDirectory) -> None:
        """CampaignDirectory is immutable."""
        with pytest.raises(AttributeError):
            directory.name = "other"  # type: ignore[misc]

    def test_files_excludes_directories(self, directory: CampaignDirectory) -> None:
        """files lists only top-level files."""
        assert directory.files == frozenset({"index.php", "data.php"})

    def test_to_dict_is_sorted(self, directory: CampaignDirectory) -> None:
        """to_dict emits set fields as sorted lists."""
        data = directory.to_dict()

        assert data["entries"] == ["assets", "data.php", "index.php"]
        assert data["script_files"] == ["data.php", "index.php"]
        assert data["entry_point"] == "index.php"

    def test_from_dict_restores_snapshot(self, directory: CampaignDirectory) -> None:
        """from_dict rebuilds an equal snapshot."""
        assert CampaignDirectory.from_dict(directory.to_dict()) == directory

    def test_from_dict_missing_field(self) -> None:
        """from_dict raises KeyError when required fields are missing."""
        with pytest.raises(KeyError):
            CampaignDirectory.from_dict({"path": "/srv/x", "name": "x"})


class TestFingerprint:
    """Tests for CampaignDirectory.fingerprint."""

    def test_equal_snapshots_share_fingerprint(self, directory: CampaignDirectory) -> None:
        """Equal structure gives an equal fingerprint."""
        assert directory.fingerprint() == replace(directory).fingerprint()

    def test_structure_change_changes_fingerprint(self, directory: CampaignDirectory) -> None:
        """Adding a file changes the fingerprint."""
        changed = replace(
            directory,
            entries=directory.entries | {"composer.json"},
            framework_markers=frozenset({"laravel:composer.json"}),
        )

        assert changed.fingerprint() != directory.fingerprint()

    def test_is_sha256_hex(self, directory: CampaignDirectory) -> None:
        """The fingerprint is a sha256 hex digest."""
        fingerprint = directory.fingerprint()

        assert len(fingerprint) == 64
        int(fingerprint, 16)


class TestClassificationVerdict:
    """Tests for ClassificationVerdict."""

    def test_to_dict(self) -> None:
        """to_dict serializes type, evidence, markers and reason."""
        verdict = ClassificationVerdict(
            campaign_type=CampaignType.FRAMEWORK_LIKE,
            evidence=("framework-bootstrap",),
            markers=("public-entry-point", "laravel:routes/"),
            reason="framework bootstrap structure detected",
        )

        assert verdict.to_dict() == {
            "type": "framework_like",
            "evidence": ["framework-bootstrap"],
            "markers": ["public-entry-point", "laravel:routes/"],
            "reason": "framework bootstrap structure detected",
        }
        assert verdict.is_deployable is False
