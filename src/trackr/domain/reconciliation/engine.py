"""Batch reconciliation of discovered records against a canonical snapshot.

The engine is read-only: it never mutates the assets it is given, and "no
match" is a reportable outcome rather than an error. Each discovered record is
matched independently, so one canonical asset may be claimed by several
discovered records in the same run.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING, Final

from trackr.domain.model import utc_now
from trackr.domain.reconciliation.contracts import (
    DuplicateSerialGroup,
    MatchTier,
    OrphanedAsset,
    OrphanReason,
    ReconciliationMatch,
    ReconciliationResult,
    ReconciliationStats,
)
from trackr.domain.reconciliation.matcher import IdentityMatcher, RecordComparer

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import datetime

    from trackr.domain.model import CanonicalAsset, DiscoveredRecord

log = logging.getLogger(__name__)

DEFAULT_ORPHAN_DAYS: Final[int] = 30
ACTIONABLE_CONFIDENCE: Final[float] = 50.0


@dataclass(slots=True)
class ReconciliationEngine:
    matcher: RecordComparer = field(default_factory=IdentityMatcher)
    actionable_confidence: float = ACTIONABLE_CONFIDENCE
    max_workers: int = 1
    clock: Callable[[], datetime] = utc_now

    def match_one(
        self,
        discovered: DiscoveredRecord,
        canonical_set: Iterable[CanonicalAsset],
    ) -> ReconciliationMatch | None:
        """Return the best-scoring canonical asset, or ``None`` below the actionable floor."""

        best: ReconciliationMatch | None = None
        for canonical in canonical_set:
            candidate = self.matcher.compare(discovered, canonical)
            if best is None or _outranks(candidate, best):
                best = candidate
        if best is None or best.confidence < self.actionable_confidence:
            return None
        return best

    def match_all(
        self,
        discovered_batch: Iterable[DiscoveredRecord],
        canonical_set: Iterable[CanonicalAsset],
    ) -> tuple[list[ReconciliationMatch], list[DiscoveredRecord]]:
        """Match each record independently; results keep the batch order."""

        batch = list(discovered_batch)
        snapshot = tuple(canonical_set)
        if self.max_workers > 1 and len(batch) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                outcomes = list(
                    executor.map(lambda record: self.match_one(record, snapshot), batch)
                )
        else:
            outcomes = [self.match_one(record, snapshot) for record in batch]

        matches: list[ReconciliationMatch] = []
        unmatched: list[DiscoveredRecord] = []
        for record, outcome in zip(batch, outcomes, strict=True):
            if outcome is None:
                log.debug("No actionable match for %s/%s", record.source_id, record.external_id)
                unmatched.append(record)
            else:
                matches.append(outcome)
        return matches, unmatched

    def find_orphaned_assets(
        self,
        canonical_set: Iterable[CanonicalAsset],
        discovered_set: Iterable[DiscoveredRecord],
        days_threshold: int = DEFAULT_ORPHAN_DAYS,
        *,
        now: datetime | None = None,
    ) -> list[OrphanedAsset]:
        """Flag assets no current discovery signal confirms.

        An asset without a serial can never be confirmed. An asset whose serial
        is absent from the batch is orphaned once it has not been seen for at
        least ``days_threshold`` whole days, or was never seen at all.
        """

        moment = now or self.clock()
        discovered_serials = {
            serial for record in discovered_set if (serial := record.normalized_serial)
        }
        orphans: list[OrphanedAsset] = []
        for asset in canonical_set:
            if asset.is_archived:
                continue
            serial = asset.normalized_serial
            if serial is None:
                orphans.append(
                    OrphanedAsset(
                        asset=asset,
                        reason=OrphanReason.MISSING_SERIAL,
                        last_seen_in_discovery=asset.last_seen_in_discovery,
                    )
                )
                continue
            if serial in discovered_serials:
                continue
            last_seen = asset.last_seen_in_discovery
            if last_seen is None:
                orphans.append(OrphanedAsset(asset=asset, reason=OrphanReason.NOT_IN_DISCOVERY))
                continue
            days = math.floor((moment - last_seen) / timedelta(days=1))
            if days >= days_threshold:
                orphans.append(
                    OrphanedAsset(
                        asset=asset,
                        reason=OrphanReason.NOT_IN_DISCOVERY,
                        last_seen_in_discovery=last_seen,
                        days_since_last_seen=days,
                    )
                )
        return orphans

    def find_duplicate_serials(
        self, canonical_set: Iterable[CanonicalAsset]
    ) -> list[DuplicateSerialGroup]:
        by_serial: dict[str, list[CanonicalAsset]] = {}
        for asset in canonical_set:
            serial = asset.normalized_serial
            if serial is None:
                continue
            by_serial.setdefault(serial, []).append(asset)

        groups = [
            DuplicateSerialGroup(serial=serial, assets=tuple(assets))
            for serial, assets in sorted(by_serial.items())
            if len(assets) > 1
        ]
        if groups:
            log.warning(
                "Found %s duplicate serial group(s): %s",
                len(groups),
                ", ".join(group.serial for group in groups),
            )
        return groups

    def get_reconciliation_stats(
        self, matches: Sequence[ReconciliationMatch]
    ) -> ReconciliationStats:
        return reconciliation_stats(matches)

    def reconcile(
        self,
        discovered_batch: Iterable[DiscoveredRecord],
        canonical_snapshot: Iterable[CanonicalAsset],
        days_threshold: int = DEFAULT_ORPHAN_DAYS,
        *,
        now: datetime | None = None,
    ) -> ReconciliationResult:
        batch = tuple(discovered_batch)
        snapshot = tuple(canonical_snapshot)
        moment = now or self.clock()

        matches, unmatched = self.match_all(batch, snapshot)
        orphaned = self.find_orphaned_assets(snapshot, batch, days_threshold, now=moment)
        duplicates = self.find_duplicate_serials(snapshot)
        stats = reconciliation_stats(matches)

        log.info(
            "Reconciled %s discovered record(s) against %s asset(s): matched=%s, "
            "unmatched=%s, orphaned=%s, duplicate_groups=%s, average_confidence=%.1f",
            len(batch),
            len(snapshot),
            stats.total,
            len(unmatched),
            len(orphaned),
            len(duplicates),
            stats.average_confidence,
        )
        return ReconciliationResult(
            matches=tuple(matches),
            unmatched=tuple(unmatched),
            orphaned=tuple(orphaned),
            duplicate_serial_groups=tuple(duplicates),
            stats=stats,
        )


def reconciliation_stats(matches: Sequence[ReconciliationMatch]) -> ReconciliationStats:
    if not matches:
        return ReconciliationStats()
    per_tier = dict.fromkeys(MatchTier, 0)
    for match in matches:
        per_tier[match.tier] += 1
    return ReconciliationStats(
        total=len(matches),
        exact=per_tier[MatchTier.EXACT],
        high=per_tier[MatchTier.HIGH],
        medium=per_tier[MatchTier.MEDIUM],
        low=per_tier[MatchTier.LOW],
        with_conflicts=sum(1 for match in matches if match.has_conflicts),
        average_confidence=sum(match.confidence for match in matches) / len(matches),
    )


def _outranks(candidate: ReconciliationMatch, incumbent: ReconciliationMatch) -> bool:
    if candidate.confidence != incumbent.confidence:
        return candidate.confidence > incumbent.confidence
    return str(candidate.canonical.id) < str(incumbent.canonical.id)
