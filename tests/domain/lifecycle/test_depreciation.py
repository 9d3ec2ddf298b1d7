from __future__ import annotations

from datetime import UTC, date, datetime, timedelta

import pytest

from tests.helpers.inventory import make_asset
from trackr.domain.errors import ValidationError
from trackr.domain.lifecycle import age_in_years, calculate_depreciation
from trackr.domain.model import CanonicalAsset, DepreciationType

PURCHASED = date(2023, 1, 1)


def _years_later(years: float) -> datetime:
    return datetime(2023, 1, 1, tzinfo=UTC) + timedelta(days=365.25 * years)


def _laptop(method: DepreciationType = DepreciationType.STRAIGHT_LINE) -> CanonicalAsset:
    return make_asset(
        purchase_date=PURCHASED,
        purchase_price=1000.0,
        salvage_value=100.0,
        useful_life=5,
        depreciation_type=method,
    )


def test_straight_line_after_two_years() -> None:
    result = calculate_depreciation(_laptop(), now=_years_later(2))

    assert result.depreciation_per_year == pytest.approx(180.0)
    assert result.current_value == pytest.approx(640.0)
    assert result.accumulated_depreciation == pytest.approx(360.0)
    assert result.age_in_years == pytest.approx(2.0)
    assert result.remaining_life_years == pytest.approx(3.0)
    assert result.original_value == pytest.approx(1000.0)
    assert not result.is_fully_depreciated


def test_double_declining_after_two_years() -> None:
    result = calculate_depreciation(
        _laptop(DepreciationType.DOUBLE_DECLINING), now=_years_later(2)
    )

    assert result.current_value == pytest.approx(360.0)
    assert result.depreciation_per_year == pytest.approx(144.0)
    assert result.method is DepreciationType.DOUBLE_DECLINING


def test_sum_of_years_after_two_years() -> None:
    result = calculate_depreciation(_laptop(DepreciationType.SUM_OF_YEARS), now=_years_later(2))

    assert result.current_value == pytest.approx(460.0)
    assert result.depreciation_per_year == pytest.approx(180.0)


def test_past_useful_life_is_fully_depreciated() -> None:
    result = calculate_depreciation(_laptop(), now=_years_later(10))

    assert result.current_value == pytest.approx(100.0)
    assert result.remaining_life_years == 0.0
    assert result.is_fully_depreciated


@pytest.mark.parametrize("method", list(DepreciationType))
@pytest.mark.parametrize("years", [0, 0.5, 1, 3.5, 5, 7, 25])
def test_current_value_never_below_salvage(method: DepreciationType, years: float) -> None:
    result = calculate_depreciation(_laptop(method), now=_years_later(years))

    assert result.current_value >= result.salvage_value
    assert result.current_value <= result.original_value


def test_purchase_in_future_counts_as_new() -> None:
    result = calculate_depreciation(_laptop(), now=_years_later(-1))

    assert result.age_in_years == 0.0
    assert result.current_value == pytest.approx(1000.0)


@pytest.mark.parametrize(
    "overrides",
    [
        {"purchase_date": None},
        {"purchase_price": None},
        {"purchase_price": 0.0},
        {"useful_life": None},
        {"useful_life": 0},
        {"salvage_value": 2000.0},
    ],
)
def test_incomplete_financials_are_rejected(overrides: dict[str, object]) -> None:
    asset = _laptop()
    for attribute, value in overrides.items():
        setattr(asset, attribute, value)

    with pytest.raises(ValidationError):
        calculate_depreciation(asset, now=_years_later(1))


def test_age_in_years_uses_julian_year() -> None:
    assert age_in_years(PURCHASED, _years_later(1.5)) == pytest.approx(1.5)
