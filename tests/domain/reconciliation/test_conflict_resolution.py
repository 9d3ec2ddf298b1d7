from __future__ import annotations

import pytest

from tests.helpers.inventory import make_asset, make_discovered
from trackr.domain.reconciliation import (
    ConflictStrategy,
    FieldConflict,
    IdentityMatcher,
    MatchTier,
    ReconciliationMatch,
    pending_review,
    planned_updates,
    resolve_conflict,
)

CONFLICT = FieldConflict(field="model", existing="Latitude 5540", discovered="Latitude 5550")


@pytest.mark.parametrize(
    ("strategy", "expected"),
    [
        (ConflictStrategy.KEEP_EXISTING, "Latitude 5540"),
        (ConflictStrategy.USE_DISCOVERED, "Latitude 5550"),
        (ConflictStrategy.MANUAL, None),
    ],
)
def test_resolve_conflict(strategy: ConflictStrategy, expected: str | None) -> None:
    assert resolve_conflict(CONFLICT, strategy) == expected


def _conflicting_match() -> ReconciliationMatch:
    discovered = make_discovered("Latitude 5540", model="Latitude 5550", manufacturer="DELL")
    return IdentityMatcher().compare(discovered, make_asset("Latitude 5540"))


def test_planned_updates_for_use_discovered() -> None:
    assert planned_updates(_conflicting_match(), ConflictStrategy.USE_DISCOVERED) == {
        "model": "Latitude 5550"
    }


@pytest.mark.parametrize("strategy", [ConflictStrategy.KEEP_EXISTING, ConflictStrategy.MANUAL])
def test_planned_updates_is_empty_without_discovered_values(strategy: ConflictStrategy) -> None:
    assert planned_updates(_conflicting_match(), strategy) == {}


def test_pending_review_selects_conflicting_and_weak_matches() -> None:
    clean = IdentityMatcher().compare(make_discovered(), make_asset())
    conflicting = _conflicting_match()
    medium = ReconciliationMatch(
        discovered=make_discovered(),
        canonical=make_asset(),
        confidence=55.0,
        tier=MatchTier.MEDIUM,
    )

    assert pending_review([clean, conflicting, medium]) == [conflicting, medium]
