"""Book-value depreciation for canonical assets (pure)."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from typing import TYPE_CHECKING, Final

from trackr.domain.errors import ValidationError
from trackr.domain.model import DepreciationType, utc_now

if TYPE_CHECKING:
    from trackr.domain.model import CanonicalAsset

DAYS_PER_YEAR: Final[float] = 365.25
CENT_EPSILON: Final[float] = 0.005


@dataclass(frozen=True, slots=True, kw_only=True)
class DepreciationResult:
    original_value: float
    current_value: float
    salvage_value: float
    depreciation_per_year: float
    accumulated_depreciation: float
    age_in_years: float
    remaining_life_years: float
    method: DepreciationType

    @property
    def is_fully_depreciated(self) -> bool:
        return self.current_value <= self.salvage_value + CENT_EPSILON


def calculate_depreciation(
    asset: CanonicalAsset, *, now: datetime | None = None
) -> DepreciationResult:
    """Current book value of ``asset``; never below its salvage value.

    Age is fractional years of 365.25 days from the purchase date. Monetary
    results are rounded to cents.
    """

    if asset.purchase_date is None:
        raise ValidationError("Purchase date is required for depreciation")
    if asset.purchase_price is None or asset.purchase_price <= 0:
        raise ValidationError("Purchase price must be positive for depreciation")
    if asset.useful_life is None or asset.useful_life <= 0:
        raise ValidationError("Useful life must be positive for depreciation")
    if asset.salvage_value < 0:
        raise ValidationError("Salvage value cannot be negative")
    if asset.salvage_value > asset.purchase_price:
        raise ValidationError("Salvage value cannot exceed purchase price")

    price = asset.purchase_price
    salvage = asset.salvage_value
    life = asset.useful_life
    age = age_in_years(asset.purchase_date, now or utc_now())

    match asset.depreciation_type:
        case DepreciationType.STRAIGHT_LINE:
            current, per_year = _straight_line(price, salvage, life, age)
        case DepreciationType.DOUBLE_DECLINING:
            current, per_year = _double_declining(price, salvage, life, age)
        case DepreciationType.SUM_OF_YEARS:
            current, per_year = _sum_of_years(price, salvage, life, age)

    current = max(salvage, current)
    return DepreciationResult(
        original_value=round(price, 2),
        current_value=round(current, 2),
        salvage_value=round(salvage, 2),
        depreciation_per_year=round(per_year, 2),
        accumulated_depreciation=round(price - current, 2),
        age_in_years=age,
        remaining_life_years=round(max(0.0, life - age), 2),
        method=asset.depreciation_type,
    )


def age_in_years(purchased: date, now: datetime) -> float:
    start = _as_utc_datetime(purchased)
    elapsed = _as_utc_datetime(now) - start
    return max(0.0, elapsed / timedelta(days=DAYS_PER_YEAR))


def _straight_line(price: float, salvage: float, life: int, age: float) -> tuple[float, float]:
    annual = (price - salvage) / life
    return max(salvage, price - annual * age), annual


def _double_declining(
    price: float, salvage: float, life: int, age: float
) -> tuple[float, float]:
    rate = 2 / life
    value = price
    for _ in range(math.floor(age)):
        value = max(salvage, value * (1 - rate))
        if value <= salvage:
            break
    # charge for the year in progress
    charge = max(0.0, min(value * rate, value - salvage))
    return value, charge


def _sum_of_years(price: float, salvage: float, life: int, age: float) -> tuple[float, float]:
    base = price - salvage
    digits = life * (life + 1) / 2
    whole_years = min(math.floor(age), life)
    accumulated = sum((life - year) / digits * base for year in range(whole_years))
    if whole_years < life:
        current_charge = (life - whole_years) / digits * base
        accumulated += current_charge * (age - whole_years)
    else:
        current_charge = 0.0
    return max(salvage, price - accumulated), current_charge


def _as_utc_datetime(value: date) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    return datetime.combine(value, time(), tzinfo=UTC)
