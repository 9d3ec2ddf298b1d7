"""Value objects produced by a reconciliation run.

Everything here is derived per run and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from trackr.domain.model import CanonicalAsset, DiscoveredRecord


class MatchTier(StrEnum):
    EXACT = "exact"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class OrphanReason(StrEnum):
    MISSING_SERIAL = "missing_serial"
    NOT_IN_DISCOVERY = "not_in_discovery"
    DUPLICATE_SERIAL = "duplicate_serial"


class ConflictStrategy(StrEnum):
    KEEP_EXISTING = "keep_existing"
    USE_DISCOVERED = "use_discovered"
    MANUAL = "manual"


@dataclass(frozen=True, slots=True)
class FieldConflict:
    field: str
    existing: str | None
    discovered: str | None


@dataclass(frozen=True, slots=True, kw_only=True)
class ReconciliationMatch:
    discovered: DiscoveredRecord
    canonical: CanonicalAsset
    confidence: float
    tier: MatchTier
    matched_fields: frozenset[str] = frozenset()
    conflicts: tuple[FieldConflict, ...] = ()

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)


@dataclass(frozen=True, slots=True, kw_only=True)
class OrphanedAsset:
    asset: CanonicalAsset
    reason: OrphanReason
    last_seen_in_discovery: datetime | None = None
    days_since_last_seen: int | None = None


@dataclass(frozen=True, slots=True)
class DuplicateSerialGroup:
    serial: str
    assets: tuple[CanonicalAsset, ...]

    def as_orphans(self) -> tuple[OrphanedAsset, ...]:
        return tuple(
            OrphanedAsset(
                asset=asset,
                reason=OrphanReason.DUPLICATE_SERIAL,
                last_seen_in_discovery=asset.last_seen_in_discovery,
            )
            for asset in self.assets
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class ReconciliationStats:
    total: int = 0
    exact: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    with_conflicts: int = 0
    average_confidence: float = 0.0


@dataclass(frozen=True, slots=True, kw_only=True)
class ReconciliationResult:
    matches: tuple[ReconciliationMatch, ...] = ()
    unmatched: tuple[DiscoveredRecord, ...] = ()
    orphaned: tuple[OrphanedAsset, ...] = ()
    duplicate_serial_groups: tuple[DuplicateSerialGroup, ...] = ()
    stats: ReconciliationStats = field(default_factory=ReconciliationStats)

    @property
    def data_quality_issues(self) -> tuple[OrphanedAsset, ...]:
        """Orphans plus every member of a duplicate-serial group."""

        issues = list(self.orphaned)
        for group in self.duplicate_serial_groups:
            issues.extend(group.as_orphans())
        return tuple(issues)

