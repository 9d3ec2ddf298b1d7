"""Seat ledger operations for license grants.

``assigned_to`` is the single source of truth for seat usage. It is replaced,
never mutated in place, so every change is visible to change tracking.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Final

from trackr.domain.errors import CapacityError, ConflictError, StateError, ValidationError
from trackr.domain.model import (
    AuditAction,
    AuditTrailEntry,
    LicenseStatus,
    LicenseType,
    SeatAssignment,
    discard_audit,
    utc_now,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from trackr.domain.model import AuditSink, LicenseGrant
    from trackr.domain.model.audit import AuditDetailValue

log = logging.getLogger(__name__)

UPDATABLE_FIELDS: Final[frozenset[str]] = frozenset(
    {
        "name",
        "vendor",
        "category",
        "license_type",
        "purchase_cost",
        "annual_cost",
        "purchase_date",
        "expiration_date",
        "renewal_notification_days",
    }
)


def allocate(
    grant: LicenseGrant,
    user_id: str,
    *,
    allocated_by: str,
    notes: str | None = None,
    audit: AuditSink = discard_audit,
    now: datetime | None = None,
) -> LicenseGrant:
    if grant.is_archived:
        raise ConflictError("Cannot allocate seats on archived license")
    if user_id in grant.assigned_to:
        raise ConflictError("User is already assigned to this license")
    if grant.used_seats >= grant.total_seats:
        raise CapacityError("No available seats for this license")
    if not user_id.strip():
        raise ValidationError("User id is required")

    moment = now or utc_now()
    grant.assigned_to = grant.assigned_to | {user_id}
    grant.assignment_history.append(
        SeatAssignment(
            user_id=user_id,
            assigned_by=allocated_by,
            assigned_date=moment,
            notes=notes,
        )
    )
    grant.touch(moment)
    _record(
        audit,
        grant,
        AuditAction.ALLOCATE,
        allocated_by,
        moment,
        details={"user_id": user_id, "used_seats": grant.used_seats},
    )
    log.debug(
        "Allocated seat on %s to %s (%s/%s)",
        grant.id,
        user_id,
        grant.used_seats,
        grant.total_seats,
    )
    return grant


def deallocate(
    grant: LicenseGrant,
    user_id: str,
    *,
    reason: str | None = None,
    actor: str = "system",
    audit: AuditSink = discard_audit,
    now: datetime | None = None,
) -> LicenseGrant:
    if user_id not in grant.assigned_to:
        raise StateError("User is not assigned to this license")

    moment = now or utc_now()
    grant.assigned_to = grant.assigned_to - {user_id}
    open_entry = grant.open_seat_for(user_id)
    if open_entry is not None:
        open_entry.unassigned_date = moment
        open_entry.unassigned_by = actor
        open_entry.reason = reason
    grant.touch(moment)
    _record(
        audit,
        grant,
        AuditAction.DEALLOCATE,
        actor,
        moment,
        reason=reason,
        details={"user_id": user_id, "used_seats": grant.used_seats},
    )
    return grant


def archive_license(
    grant: LicenseGrant,
    *,
    actor: str,
    reason: str | None = None,
    audit: AuditSink = discard_audit,
    now: datetime | None = None,
) -> LicenseGrant:
    """Archive a license; current seat holders keep their seats."""

    if grant.is_archived:
        raise ConflictError("License is already archived")

    moment = now or utc_now()
    grant.mark_archived(actor=actor, reason=reason, at=moment)
    grant.touch(moment)
    _record(audit, grant, AuditAction.ARCHIVE, actor, moment, reason=reason)
    return grant


def restore_license(
    grant: LicenseGrant,
    *,
    actor: str = "system",
    audit: AuditSink = discard_audit,
    now: datetime | None = None,
) -> LicenseGrant:
    if not grant.is_archived:
        raise StateError("License is not archived")

    moment = now or utc_now()
    grant.clear_archival()
    grant.touch(moment)
    _record(audit, grant, AuditAction.RESTORE, actor, moment)
    return grant


def resize(
    grant: LicenseGrant,
    total_seats: int,
    *,
    actor: str = "system",
    reason: str | None = None,
    audit: AuditSink = discard_audit,
    now: datetime | None = None,
) -> LicenseGrant:
    """Change purchased capacity.

    Shrinking below current usage is allowed; the grant then reports
    ``overAllocated`` and :func:`trackr.domain.licensing.true_up` prices the gap.
    """

    if grant.is_archived:
        raise ConflictError("Cannot resize archived license")
    if total_seats < 1:
        raise ValidationError("Total seats must be at least 1")

    moment = now or utc_now()
    previous = grant.total_seats
    grant.total_seats = total_seats
    grant.touch(moment)
    _record(
        audit,
        grant,
        AuditAction.UPDATE,
        actor,
        moment,
        reason=reason,
        details={"from_total_seats": previous, "to_total_seats": total_seats},
    )
    if grant.used_seats > total_seats:
        log.warning(
            "License %s resized below usage: %s used of %s",
            grant.id,
            grant.used_seats,
            total_seats,
        )
    return grant


def set_lifecycle_override(
    grant: LicenseGrant,
    override: LicenseStatus | None,
    *,
    actor: str = "system",
    reason: str | None = None,
    audit: AuditSink = discard_audit,
    now: datetime | None = None,
) -> LicenseGrant:
    """Cancel or suspend a license (``None`` lifts the override)."""

    if grant.is_archived:
        raise ConflictError("Cannot change status of archived license")
    if override is not None and override not in {
        LicenseStatus.CANCELLED,
        LicenseStatus.SUSPENDED,
    }:
        raise ValidationError(f"Status {override} is derived from dates and cannot be set")

    moment = now or utc_now()
    grant.lifecycle_override = override
    grant.touch(moment)
    _record(
        audit,
        grant,
        AuditAction.UPDATE,
        actor,
        moment,
        reason=reason,
        details={"lifecycle_override": None if override is None else str(override)},
    )
    return grant


def update_license(
    grant: LicenseGrant,
    changes: Mapping[str, object],
    *,
    actor: str = "system",
    audit: AuditSink = discard_audit,
    now: datetime | None = None,
) -> LicenseGrant:
    """Apply plain attribute changes; seats and status have their own operations."""

    if grant.is_archived:
        raise ConflictError("Cannot update archived license")
    rejected = sorted(set(changes) - UPDATABLE_FIELDS)
    if rejected:
        raise ValidationError(f"Fields cannot be updated directly: {', '.join(rejected)}")
    validated = {name: _validate_update(name, value) for name, value in changes.items()}
    if not validated:
        return grant

    moment = now or utc_now()
    for name, value in validated.items():
        setattr(grant, name, value)
    grant.touch(moment)
    _record(
        audit,
        grant,
        AuditAction.UPDATE,
        actor,
        moment,
        details={"fields": ",".join(sorted(validated))},
    )
    return grant


def _validate_update(name: str, value: object) -> object:
    match name:
        case "name":
            if not isinstance(value, str) or not value.strip():
                raise ValidationError("Name is required")
            return value.strip()
        case "vendor" | "category":
            if value is None:
                return None
            if not isinstance(value, str):
                raise ValidationError(f"{name} must be a string")
            return value.strip() or None
        case "purchase_cost" | "annual_cost":
            if value is None and name == "annual_cost":
                return None
            if isinstance(value, bool) or not isinstance(value, int | float) or value < 0:
                raise ValidationError(f"{name} must be a non-negative number")
            return float(value)
        case "renewal_notification_days":
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValidationError("renewal_notification_days must be a non-negative integer")
            return value
        case "purchase_date" | "expiration_date":
            if value is None or isinstance(value, datetime):
                return value
            raise ValidationError(f"{name} must be a datetime")
        case "license_type":
            try:
                return LicenseType(value)
            except ValueError as exc:
                raise ValidationError(f"Unknown license type: {value!r}") from exc
        case _:
            raise ValidationError(f"Field cannot be updated directly: {name}")


def _record(
    audit: AuditSink,
    grant: LicenseGrant,
    action: AuditAction,
    actor: str,
    moment: datetime,
    *,
    reason: str | None = None,
    details: dict[str, AuditDetailValue] | None = None,
) -> None:
    audit(
        AuditTrailEntry(
            entity_type=grant.entity_type,
            entity_id=grant.id,
            action=action,
            actor=actor,
            reason=reason,
            timestamp=moment,
            details=details or {},
        )
    )
