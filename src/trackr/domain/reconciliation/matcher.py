"""Weighted, rule-based scoring of one discovered record against one canonical asset."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from trackr.domain.reconciliation.contracts import FieldConflict, MatchTier, ReconciliationMatch
from trackr.domain.similarity import normalize_identifier, similarity

if TYPE_CHECKING:
    from trackr.domain.model import CanonicalAsset, DiscoveredRecord


@dataclass(frozen=True, slots=True)
class MatchWeights:
    serial: float = 60.0
    name: float = 20.0
    manufacturer: float = 10.0
    model: float = 10.0
    name_threshold: float = 0.8
    exact_tier: float = 90.0
    high_tier: float = 70.0
    medium_tier: float = 50.0
    ceiling: float = 100.0

    def tier_for(self, confidence: float) -> MatchTier:
        if confidence >= self.exact_tier:
            return MatchTier.EXACT
        if confidence >= self.high_tier:
            return MatchTier.HIGH
        if confidence >= self.medium_tier:
            return MatchTier.MEDIUM
        return MatchTier.LOW


class RecordComparer(Protocol):
    def compare(
        self, discovered: DiscoveredRecord, canonical: CanonicalAsset
    ) -> ReconciliationMatch: ...


@dataclass(frozen=True, slots=True)
class IdentityMatcher:
    weights: MatchWeights = field(default_factory=MatchWeights)

    def compare(
        self, discovered: DiscoveredRecord, canonical: CanonicalAsset
    ) -> ReconciliationMatch:
        weights = self.weights
        confidence = 0.0
        matched: set[str] = set()
        conflicts: list[FieldConflict] = []

        discovered_serial = discovered.normalized_serial
        if discovered_serial is not None and discovered_serial == canonical.normalized_serial:
            confidence += weights.serial
            matched.add("serial_number")

        score = name_similarity(discovered, canonical)
        if score > weights.name_threshold:
            confidence += weights.name * score
            matched.add("name")

        for field_name, weight in (
            ("manufacturer", weights.manufacturer),
            ("model", weights.model),
        ):
            existing: str | None = getattr(canonical, field_name)
            observed: str | None = getattr(discovered, field_name)
            left = normalize_identifier(existing)
            right = normalize_identifier(observed)
            if left is None or right is None:
                continue
            if left == right:
                confidence += weight
                matched.add(field_name)
            else:
                conflicts.append(
                    FieldConflict(field=field_name, existing=existing, discovered=observed)
                )

        confidence = min(confidence, weights.ceiling)
        return ReconciliationMatch(
            discovered=discovered,
            canonical=canonical,
            confidence=confidence,
            tier=weights.tier_for(confidence),
            matched_fields=frozenset(matched),
            conflicts=tuple(conflicts),
        )


def name_similarity(discovered: DiscoveredRecord, canonical: CanonicalAsset) -> float:
    """Similarity of the two names, ignoring a leading manufacturer on either side.

    Inventory names often carry the vendor ("Dell Latitude 5540") while discovery
    sources report the bare model name ("Latitude 5540"). The vendor is only
    stripped when the two records do not name different manufacturers.
    """

    left = discovered.name.strip()
    right = canonical.name.strip()
    if not left or not right:
        return 0.0
    best = similarity(left, right)
    prefixes = {
        prefix
        for prefix in (
            normalize_identifier(canonical.manufacturer),
            normalize_identifier(discovered.manufacturer),
        )
        if prefix is not None
    }
    if len(prefixes) != 1:
        return best
    [prefix] = prefixes
    return max(best, similarity(_strip_prefix(left, prefix), _strip_prefix(right, prefix)))


def _strip_prefix(name: str, prefix: str) -> str:
    if name.lower().startswith(prefix + " "):
        return name[len(prefix) + 1 :].lstrip()
    return name
