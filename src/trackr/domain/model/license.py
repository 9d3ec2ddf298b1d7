"""Software license grant and its seat ledger.

Seat usage, compliance and date status are computed from ``assigned_to`` and
the grant's dates on every read; none of them is ever stored.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING, ClassVar, Final

from trackr.domain.model.entity import ArchivableEntity, Entity, utc_now
from trackr.domain.model.enums import (
    ComplianceStatus,
    EntityType,
    LicenseStatus,
    LicenseType,
)

if TYPE_CHECKING:
    from datetime import datetime

AT_RISK_RATIO: Final[float] = 0.90
UNDER_UTILIZED_RATIO: Final[float] = 0.30
DEFAULT_RENEWAL_NOTIFICATION_DAYS: Final[int] = 30


@dataclass(eq=False, kw_only=True)
class SeatAssignment(Entity):
    """One seat held by one user; open until ``unassigned_date`` is set."""

    user_id: str
    assigned_by: str
    assigned_date: datetime
    unassigned_date: datetime | None = None
    unassigned_by: str | None = None
    reason: str | None = None
    notes: str | None = None

    @property
    def is_open(self) -> bool:
        return self.unassigned_date is None


@dataclass(eq=False, kw_only=True)
class LicenseGrant(ArchivableEntity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.LICENSE

    name: str
    total_seats: int
    vendor: str | None = None
    license_type: LicenseType = LicenseType.SUBSCRIPTION
    category: str | None = None

    purchase_cost: float = 0.0
    annual_cost: float | None = None
    purchase_date: datetime | None = None
    expiration_date: datetime | None = None
    renewal_notification_days: int = DEFAULT_RENEWAL_NOTIFICATION_DAYS
    lifecycle_override: LicenseStatus | None = None

    assigned_to: frozenset[str] = field(default_factory=frozenset[str])
    assignment_history: list[SeatAssignment] = field(
        default_factory=list[SeatAssignment], repr=False
    )

    @property
    def used_seats(self) -> int:
        return len(self.assigned_to)

    @property
    def available_seats(self) -> int:
        return max(0, self.total_seats - self.used_seats)

    @property
    def utilization(self) -> float:
        """Used share of purchased seats as a ratio (may exceed 1.0)."""

        if self.total_seats <= 0:
            return 0.0
        return self.used_seats / self.total_seats

    @property
    def utilization_rate(self) -> float:
        """Utilization as a percentage."""

        return self.utilization * 100

    @property
    def cost_per_seat(self) -> float:
        if self.total_seats <= 0:
            return 0.0
        cost = self.annual_cost if self.annual_cost is not None else self.purchase_cost
        return cost / self.total_seats

    @property
    def compliance_status(self) -> ComplianceStatus:
        if self.used_seats > self.total_seats:
            return ComplianceStatus.OVER_ALLOCATED
        ratio = self.utilization
        if ratio >= AT_RISK_RATIO:
            return ComplianceStatus.AT_RISK
        if ratio < UNDER_UTILIZED_RATIO:
            return ComplianceStatus.UNDER_UTILIZED
        return ComplianceStatus.COMPLIANT

    @property
    def status(self) -> LicenseStatus:
        return self.status_at(utc_now())

    def status_at(self, now: datetime) -> LicenseStatus:
        override = self.lifecycle_override
        if override is not None and override in {LicenseStatus.CANCELLED, LicenseStatus.SUSPENDED}:
            return override
        if self.license_type is LicenseType.PERPETUAL or self.expiration_date is None:
            return LicenseStatus.ACTIVE
        if now > self.expiration_date:
            return LicenseStatus.EXPIRED
        if self.expiration_date - now <= timedelta(days=self.renewal_notification_days):
            return LicenseStatus.EXPIRING
        return LicenseStatus.ACTIVE

    def days_until_expiration(self, now: datetime | None = None) -> int | None:
        if self.expiration_date is None:
            return None
        remaining = self.expiration_date - (now or utc_now())
        return math.ceil(remaining / timedelta(days=1))

    def open_seat_for(self, user_id: str) -> SeatAssignment | None:
        for entry in reversed(self.assignment_history):
            if entry.user_id == user_id and entry.is_open:
                return entry
        return None
