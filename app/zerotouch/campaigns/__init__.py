"""Campaign discovery and structure classification.

This module provides the directory snapshot models, the scanner that
produces them and the rule-table classifier that judges them.
"""

from zerotouch.campaigns.classifier import (
    CLASSIFICATION_RULES,
    FRAMEWORK_REASON,
    UNKNOWN_REASON,
    ClassificationRule,
    classify,
)
from zerotouch.campaigns.models import CampaignDirectory, CampaignType, ClassificationVerdict
from zerotouch.campaigns.scanner import CampaignScanner

__all__ = [
    "CLASSIFICATION_RULES",
    "FRAMEWORK_REASON",
    "UNKNOWN_REASON",
    "CampaignDirectory",
    "CampaignScanner",
    "CampaignType",
    "ClassificationRule",
    "ClassificationVerdict",
    "classify",
]
