"""Identity reconciliation of discovered device records against the canonical inventory.

Flow per run:
1) score every discovered record against every canonical asset
2) keep the best actionable candidate per record (ties go to the smaller id)
3) report orphaned canonical assets and duplicate serial groups
4) hand reviewed matches to conflict resolution / discovery acknowledgement
"""

from __future__ import annotations

from .contracts import (
    ConflictStrategy,
    DuplicateSerialGroup,
    FieldConflict,
    MatchTier,
    OrphanedAsset,
    OrphanReason,
    ReconciliationMatch,
    ReconciliationResult,
    ReconciliationStats,
)
from .engine import ReconciliationEngine, reconciliation_stats
from .matcher import IdentityMatcher, MatchWeights, RecordComparer
from .resolve import pending_review, planned_updates, resolve_conflict

__all__ = [
    "ConflictStrategy",
    "DuplicateSerialGroup",
    "FieldConflict",
    "IdentityMatcher",
    "MatchTier",
    "MatchWeights",
    "OrphanReason",
    "OrphanedAsset",
    "ReconciliationEngine",
    "ReconciliationMatch",
    "ReconciliationResult",
    "ReconciliationStats",
    "RecordComparer",
    "pending_review",
    "planned_updates",
    "reconciliation_stats",
    "resolve_conflict",
]
