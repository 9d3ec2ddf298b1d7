"""Side-effect free queries over license portfolios: true-up, optimization, compliance."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING, Final

from trackr.domain.model import ComplianceStatus, LicenseStatus, utc_now

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from trackr.domain.model import LicenseGrant

DEFAULT_OPTIMIZATION_THRESHOLD: Final[float] = 0.70
DEFAULT_EXPIRING_DAYS: Final[int] = 30


@dataclass(frozen=True, slots=True)
class TrueUpResult:
    license: LicenseGrant
    shortfall: int
    cost: float


@dataclass(frozen=True, slots=True, kw_only=True)
class DowngradeCandidate:
    license: LicenseGrant
    current_seats: int
    used_seats: int
    recommended_seats: int
    utilization_rate: float
    potential_savings: float


@dataclass(frozen=True, slots=True, kw_only=True)
class ComplianceReport:
    total: int
    compliant: int
    over_allocated: int
    under_utilized: int
    at_risk: int
    score: float
    non_compliant: tuple[LicenseGrant, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class UtilizationStats:
    license_count: int
    total_seats: int
    used_seats: int
    available_seats: int
    utilization_rate: float
    total_annual_cost: float


@dataclass(frozen=True, slots=True, kw_only=True)
class PortfolioReport:
    """Every portfolio query evaluated once against one snapshot of licenses."""

    compliance: ComplianceReport
    utilization: UtilizationStats
    optimization: list[DowngradeCandidate]
    expiring: list[LicenseGrant]
    true_ups: list[TrueUpResult]


def true_up(grant: LicenseGrant) -> TrueUpResult:
    shortfall = max(0, grant.used_seats - grant.total_seats)
    return TrueUpResult(
        license=grant,
        shortfall=shortfall,
        cost=round(shortfall * grant.cost_per_seat, 2),
    )


def optimization_candidates(
    licenses: Iterable[LicenseGrant],
    threshold: float = DEFAULT_OPTIMIZATION_THRESHOLD,
) -> list[DowngradeCandidate]:
    """Licenses used below ``threshold`` of capacity, biggest savings first."""

    candidates: list[DowngradeCandidate] = []
    for grant in licenses:
        if grant.is_archived or grant.total_seats <= 0:
            continue
        if grant.utilization >= threshold:
            continue
        unused = grant.total_seats - grant.used_seats
        candidates.append(
            DowngradeCandidate(
                license=grant,
                current_seats=grant.total_seats,
                used_seats=grant.used_seats,
                recommended_seats=grant.used_seats,
                utilization_rate=round(grant.utilization_rate, 2),
                potential_savings=round(unused * grant.cost_per_seat, 2),
            )
        )
    candidates.sort(key=lambda candidate: candidate.potential_savings, reverse=True)
    return candidates


def compliance_report(licenses: Iterable[LicenseGrant]) -> ComplianceReport:
    active = [grant for grant in licenses if not grant.is_archived]
    counts = dict.fromkeys(ComplianceStatus, 0)
    for grant in active:
        counts[grant.compliance_status] += 1
    non_compliant = tuple(
        grant
        for grant in active
        if grant.compliance_status
        in {ComplianceStatus.OVER_ALLOCATED, ComplianceStatus.AT_RISK}
    )
    total = len(active)
    score = counts[ComplianceStatus.COMPLIANT] / total * 100 if total else 100.0
    return ComplianceReport(
        total=total,
        compliant=counts[ComplianceStatus.COMPLIANT],
        over_allocated=counts[ComplianceStatus.OVER_ALLOCATED],
        under_utilized=counts[ComplianceStatus.UNDER_UTILIZED],
        at_risk=counts[ComplianceStatus.AT_RISK],
        score=round(score, 2),
        non_compliant=non_compliant,
    )


def utilization_stats(
    licenses: Iterable[LicenseGrant], *, now: datetime | None = None
) -> UtilizationStats:
    """Seat totals over non-archived licenses that are not expired, cancelled or suspended."""

    moment = now or utc_now()
    usable = [
        grant
        for grant in licenses
        if not grant.is_archived
        and grant.status_at(moment) in {LicenseStatus.ACTIVE, LicenseStatus.EXPIRING}
    ]
    total_seats = sum(grant.total_seats for grant in usable)
    used_seats = sum(grant.used_seats for grant in usable)
    return UtilizationStats(
        license_count=len(usable),
        total_seats=total_seats,
        used_seats=used_seats,
        available_seats=sum(grant.available_seats for grant in usable),
        utilization_rate=round(used_seats / total_seats * 100, 2) if total_seats else 0.0,
        total_annual_cost=round(
            sum(grant.annual_cost or grant.purchase_cost for grant in usable), 2
        ),
    )


def expiring_licenses(
    licenses: Iterable[LicenseGrant],
    days: int = DEFAULT_EXPIRING_DAYS,
    *,
    now: datetime | None = None,
) -> list[LicenseGrant]:
    """Non-archived licenses expiring within ``days``, soonest first."""

    moment = now or utc_now()
    horizon = moment + timedelta(days=days)
    expiring = [
        grant
        for grant in licenses
        if not grant.is_archived
        and grant.expiration_date is not None
        and moment <= grant.expiration_date <= horizon
    ]
    return sorted(expiring, key=lambda grant: grant.expiration_date or horizon)


def portfolio_report(
    licenses: Iterable[LicenseGrant],
    *,
    optimization_threshold: float = DEFAULT_OPTIMIZATION_THRESHOLD,
    expiring_days: int = DEFAULT_EXPIRING_DAYS,
    now: datetime | None = None,
) -> PortfolioReport:
    """Run the portfolio queries together; true-ups list only licenses with a shortfall."""

    snapshot = list(licenses)
    moment = now or utc_now()
    true_ups = [
        result
        for result in (true_up(grant) for grant in snapshot if not grant.is_archived)
        if result.shortfall > 0
    ]
    return PortfolioReport(
        compliance=compliance_report(snapshot),
        utilization=utilization_stats(snapshot, now=moment),
        optimization=optimization_candidates(snapshot, optimization_threshold),
        expiring=expiring_licenses(snapshot, expiring_days, now=moment),
        true_ups=true_ups,
    )
