"""Structure classifier for campaign directories.

Classification is a pure function of a CampaignDirectory snapshot. The
rules are an ordered table: every predicate is evaluated so the verdict
records all rules that fired, and the first one that fired decides.

Priority:
1. framework-bootstrap: public/ entry point plus a framework marker.
2. direct-entry-point: top-level entry point, no framework manifest.
3. passive-assets-only: nothing but passive asset files.
4. fallback: anything else is UNKNOWN.
"""

from collections.abc import Callable
from dataclasses import dataclass

from zerotouch.campaigns.models import CampaignDirectory, CampaignType, ClassificationVerdict

FRAMEWORK_REASON = "framework bootstrap structure detected"
UNKNOWN_REASON = "no recognized entry point"


@dataclass(frozen=True, slots=True)
class ClassificationRule:
    """One row of the classification table.

    Attributes:
        name: Rule name recorded as evidence when the predicate holds.
        applies: Predicate over the directory snapshot.
        decide: Maps the snapshot to a campaign type once the rule wins.
        reason: Reason attached to the verdict.
    """

    name: str
    applies: Callable[[CampaignDirectory], bool]
    decide: Callable[[CampaignDirectory], CampaignType]
    reason: str


def _has_manifest(directory: CampaignDirectory) -> bool:
    """Whether a framework manifest file (not directory) marker was seen."""
    return any(not marker.endswith("/") for marker in directory.framework_markers)


def _is_framework_bootstrap(directory: CampaignDirectory) -> bool:
    return directory.public_entry_point and bool(directory.framework_markers)


def _has_direct_entry_point(directory: CampaignDirectory) -> bool:
    return directory.entry_point is not None and not _has_manifest(directory)


def _has_only_passive_assets(directory: CampaignDirectory) -> bool:
    return bool(directory.files) and not directory.script_files and not directory.other_files


def _static_or_dynamic(directory: CampaignDirectory) -> CampaignType:
    if directory.script_files:
        return CampaignType.DYNAMIC_SIMPLE
    return CampaignType.STATIC


CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(
        name="framework-bootstrap",
        applies=_is_framework_bootstrap,
        decide=lambda _: CampaignType.FRAMEWORK_LIKE,
        reason=FRAMEWORK_REASON,
    ),
    ClassificationRule(
        name="direct-entry-point",
        applies=_has_direct_entry_point,
        decide=_static_or_dynamic,
        reason="direct entry point found",
    ),
    ClassificationRule(
        name="passive-assets-only",
        applies=_has_only_passive_assets,
        decide=lambda _: CampaignType.STATIC,
        reason="only passive assets found",
    ),
)


def observed_markers(directory: CampaignDirectory) -> tuple[str, ...]:
    """List the marker names present in a snapshot, in a stable order."""
    markers: list[str] = []
    if directory.public_entry_point:
        markers.append("public-entry-point")
    if directory.entry_point is not None:
        markers.append(f"entry-point:{directory.entry_point}")
    markers.extend(sorted(directory.framework_markers))
    markers.extend(f"script:{name}" for name in sorted(directory.script_files))
    return tuple(markers)


def classify(
    directory: CampaignDirectory,
    rules: tuple[ClassificationRule, ...] = CLASSIFICATION_RULES,
) -> ClassificationVerdict:
    """Classify a campaign directory snapshot.

    Args:
        directory: Snapshot to classify.
        rules: Ordered rule table; the first rule that fires decides.

    Returns:
        ClassificationVerdict with the fired rule names as evidence.
        An empty directory, or one matching no rule, is UNKNOWN.
    """
    markers = observed_markers(directory)

    if directory.is_empty:
        return ClassificationVerdict(
            campaign_type=CampaignType.UNKNOWN,
            evidence=("fallback",),
            markers=markers,
            reason=f"{UNKNOWN_REASON} (empty directory)",
        )

    fired = [rule for rule in rules if rule.applies(directory)]
    evidence = tuple(rule.name for rule in fired)

    if not fired:
        return ClassificationVerdict(
            campaign_type=CampaignType.UNKNOWN,
            evidence=("fallback",),
            markers=markers,
            reason=UNKNOWN_REASON,
        )

    winner = fired[0]
    return ClassificationVerdict(
        campaign_type=winner.decide(directory),
        evidence=evidence,
        markers=markers,
        reason=winner.reason,
    )
