"""Data models for zerotouch.

This module exports the audit history and scan report structures.
"""

from zerotouch.models.history import (
    HistoryActionType,
    HistoryEntry,
    HistoryItem,
)
from zerotouch.models.report import (
    CampaignReport,
    ChangeType,
    Outcome,
    ScanMetadata,
    ScanReport,
)

__all__ = [
    "CampaignReport",
    "ChangeType",
    "HistoryActionType",
    "HistoryEntry",
    "HistoryItem",
    "Outcome",
    "ScanMetadata",
    "ScanReport",
]
