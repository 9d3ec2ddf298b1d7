from __future__ import annotations

import pytest

from tests.helpers.inventory import make_asset, make_discovered
from trackr.domain.reconciliation import FieldConflict, IdentityMatcher, MatchTier, MatchWeights
from trackr.domain.reconciliation.matcher import name_similarity


def test_serial_and_vendor_prefixed_name_reach_high_tier() -> None:
    discovered = make_discovered(
        "Latitude 5540", serial_number="SN123", manufacturer=None, model=None
    )
    canonical = make_asset(
        "Dell Latitude 5540", serial_number="sn123", manufacturer="Dell", model=None
    )

    match = IdentityMatcher().compare(discovered, canonical)

    assert match.confidence >= 60
    assert match.confidence == pytest.approx(80.0)
    assert match.tier is MatchTier.HIGH
    assert match.matched_fields == {"serial_number", "name"}
    assert match.conflicts == ()


def test_full_agreement_is_capped_and_exact() -> None:
    discovered = make_discovered("Dell Latitude 5540", serial_number="SN-0001")
    canonical = make_asset("Dell Latitude 5540", serial_number="sn-0001")

    match = IdentityMatcher().compare(discovered, canonical)

    assert match.confidence == pytest.approx(100.0)
    assert match.tier is MatchTier.EXACT
    assert match.matched_fields == {"serial_number", "name", "manufacturer", "model"}


def test_disagreeing_manufacturer_and_model_are_reported_as_conflicts() -> None:
    discovered = make_discovered(
        "Latitude 5540", serial_number="SN-0001", manufacturer="HP", model="EliteBook 840"
    )
    canonical = make_asset("Latitude 5540", serial_number="SN-0001")

    match = IdentityMatcher().compare(discovered, canonical)

    assert match.confidence == pytest.approx(80.0)
    assert match.has_conflicts
    assert match.conflicts == (
        FieldConflict(field="manufacturer", existing="Dell", discovered="HP"),
        FieldConflict(field="model", existing="Latitude 5540", discovered="EliteBook 840"),
    )


def test_missing_fields_neither_score_nor_conflict() -> None:
    discovered = make_discovered("Latitude 5540", serial_number=None, manufacturer=None, model=None)
    canonical = make_asset("Latitude 5540", serial_number="SN-0001")

    match = IdentityMatcher().compare(discovered, canonical)

    assert match.confidence == pytest.approx(20.0)
    assert match.tier is MatchTier.LOW
    assert match.conflicts == ()


def test_blank_serials_never_match() -> None:
    discovered = make_discovered("Other", serial_number="  ", manufacturer=None, model=None)
    canonical = make_asset("Laptop", serial_number=None, manufacturer=None, model=None)

    match = IdentityMatcher().compare(discovered, canonical)

    assert "serial_number" not in match.matched_fields
    assert match.confidence == pytest.approx(0.0)


def test_name_below_threshold_earns_nothing() -> None:
    discovered = make_discovered("MacBook Air", serial_number=None, manufacturer=None, model=None)
    canonical = make_asset("ThinkPad X1", serial_number=None, manufacturer=None, model=None)

    match = IdentityMatcher().compare(discovered, canonical)

    assert "name" not in match.matched_fields
    assert match.confidence == pytest.approx(0.0)


def test_partial_name_credit_is_proportional() -> None:
    # one substitution in a nine character name
    discovered = make_discovered("ThinkPad1", serial_number=None, manufacturer=None, model=None)
    canonical = make_asset("ThinkPad2", serial_number=None, manufacturer=None, model=None)

    match = IdentityMatcher().compare(discovered, canonical)

    assert match.confidence == pytest.approx(20 * 8 / 9)


def test_name_similarity_strips_manufacturer_from_either_side() -> None:
    discovered = make_discovered("HP EliteBook 840", manufacturer="HP")
    canonical = make_asset("EliteBook 840", manufacturer=None)

    assert name_similarity(discovered, canonical) == pytest.approx(1.0)


def test_name_similarity_strips_shared_manufacturer() -> None:
    discovered = make_discovered("Latitude 5540", manufacturer="DELL")
    canonical = make_asset("Dell Latitude 5540", manufacturer="Dell")

    assert name_similarity(discovered, canonical) == pytest.approx(1.0)


def test_name_similarity_keeps_vendor_when_manufacturers_differ() -> None:
    discovered = make_discovered("HP EliteBook 840", manufacturer="HP")
    canonical = make_asset("Dell EliteBook 840", manufacturer="Dell")

    score = name_similarity(discovered, canonical)

    assert score == pytest.approx(1 - 4 / 18)
    assert score < 0.8


@pytest.mark.parametrize(
    ("confidence", "tier"),
    [
        (100.0, MatchTier.EXACT),
        (90.0, MatchTier.EXACT),
        (89.9, MatchTier.HIGH),
        (70.0, MatchTier.HIGH),
        (69.9, MatchTier.MEDIUM),
        (50.0, MatchTier.MEDIUM),
        (49.9, MatchTier.LOW),
        (0.0, MatchTier.LOW),
    ],
)
def test_tier_boundaries(confidence: float, tier: MatchTier) -> None:
    assert MatchWeights().tier_for(confidence) is tier


def test_custom_weights_change_scoring() -> None:
    matcher = IdentityMatcher(MatchWeights(serial=95.0))
    discovered = make_discovered("x", serial_number="SN-1", manufacturer=None, model=None)
    canonical = make_asset("y", serial_number="sn-1", manufacturer=None, model=None)

    match = matcher.compare(discovered, canonical)

    assert match.confidence == pytest.approx(95.0)
    assert match.tier is MatchTier.EXACT
