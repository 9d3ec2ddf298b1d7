"""State machine for canonical assets.

Statuses are ``In Stock``, ``Active``, ``Repair`` and ``Retired`` with an
orthogonal archival flag. Every operation checks all of its preconditions
before touching the asset, bumps ``version`` on success and reports exactly one
audit entry to the supplied sink.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date
from typing import TYPE_CHECKING, Final

from trackr.domain.errors import ConflictError, NotFoundError, StateError, ValidationError
from trackr.domain.model import (
    AssetAssignment,
    AssetStatus,
    AuditAction,
    AuditTrailEntry,
    CustomField,
    CustomFieldType,
    DepreciationType,
    LocationChange,
    discard_audit,
    utc_now,
)

if TYPE_CHECKING:
    from datetime import datetime

    from trackr.domain.model import AuditSink, CanonicalAsset, CustomFieldValue
    from trackr.domain.model.audit import AuditDetailValue

log = logging.getLogger(__name__)

# Transitions reachable through change_status; Active is entered via assign only.
STATUS_TRANSITIONS: Final[Mapping[AssetStatus, frozenset[AssetStatus]]] = {
    AssetStatus.IN_STOCK: frozenset({AssetStatus.REPAIR, AssetStatus.RETIRED}),
    AssetStatus.REPAIR: frozenset({AssetStatus.IN_STOCK, AssetStatus.RETIRED}),
    AssetStatus.ACTIVE: frozenset(),
    AssetStatus.RETIRED: frozenset(),
}

UPDATABLE_FIELDS: Final[frozenset[str]] = frozenset(
    {
        "name",
        "serial_number",
        "asset_tag",
        "manufacturer",
        "model",
        "category",
        "purchase_date",
        "purchase_price",
        "salvage_value",
        "useful_life",
        "depreciation_type",
    }
)


def archive(
    asset: CanonicalAsset,
    *,
    actor: str,
    reason: str | None = None,
    audit: AuditSink = discard_audit,
    now: datetime | None = None,
) -> CanonicalAsset:
    if asset.is_archived:
        raise ConflictError("Asset is already archived")
    _require_actor(actor)

    moment = now or utc_now()
    details: dict[str, AuditDetailValue] = {"previous_status": str(asset.status)}
    open_entry = asset.open_assignment
    if open_entry is not None:
        open_entry.close(returned_by=actor, at=moment)
        details["returned_from"] = open_entry.user_id
    asset.assigned_to = None
    asset.assigned_date = None
    asset.mark_archived(actor=actor, reason=reason, at=moment)
    asset.status = AssetStatus.RETIRED
    asset.touch(moment)
    _record(audit, asset, AuditAction.ARCHIVE, actor, moment, reason=reason, details=details)
    log.debug("Archived asset %s by %s", asset.id, actor)
    return asset


def restore(
    asset: CanonicalAsset,
    *,
    actor: str = "system",
    audit: AuditSink = discard_audit,
    now: datetime | None = None,
) -> CanonicalAsset:
    """Bring an archived asset back as ``In Stock``; its prior status is not preserved."""

    if not asset.is_archived:
        raise StateError("Asset is not archived")

    moment = now or utc_now()
    previous_reason = asset.archive_reason
    asset.clear_archival()
    asset.status = AssetStatus.IN_STOCK
    asset.touch(moment)
    _record(
        audit,
        asset,
        AuditAction.RESTORE,
        actor,
        moment,
        details={"archive_reason": previous_reason},
    )
    return asset


def assign(
    asset: CanonicalAsset,
    user_id: str,
    *,
    assigned_by: str,
    notes: str | None = None,
    audit: AuditSink = discard_audit,
    now: datetime | None = None,
) -> CanonicalAsset:
    if asset.is_archived:
        raise ConflictError("Cannot assign archived asset")
    if asset.assigned_to is not None:
        raise ConflictError("Asset is already assigned")
    if asset.status in {AssetStatus.REPAIR, AssetStatus.RETIRED}:
        raise StateError(f"Cannot assign asset in status {asset.status}")
    if not user_id.strip():
        raise ValidationError("User id is required")
    _require_actor(assigned_by)

    moment = now or utc_now()
    asset.assigned_to = user_id
    asset.assigned_date = moment
    asset.status = AssetStatus.ACTIVE
    asset.assignment_history.append(
        AssetAssignment(
            user_id=user_id,
            assigned_by=assigned_by,
            assigned_date=moment,
            notes=notes,
        )
    )
    asset.touch(moment)
    _record(audit, asset, AuditAction.ASSIGN, assigned_by, moment, details={"user_id": user_id})
    return asset


def return_asset(
    asset: CanonicalAsset,
    *,
    returned_by: str,
    notes: str | None = None,
    audit: AuditSink = discard_audit,
    now: datetime | None = None,
) -> CanonicalAsset:
    if asset.is_archived:
        raise ConflictError("Cannot return archived asset")
    if asset.assigned_to is None:
        raise StateError("Asset is not assigned")
    _require_actor(returned_by)

    moment = now or utc_now()
    user_id = asset.assigned_to
    open_entry = asset.open_assignment
    if open_entry is not None:
        open_entry.close(returned_by=returned_by, at=moment, notes=notes)
    asset.assigned_to = None
    asset.assigned_date = None
    asset.status = AssetStatus.IN_STOCK
    asset.touch(moment)
    _record(audit, asset, AuditAction.RETURN, returned_by, moment, details={"user_id": user_id})
    return asset


def transfer(
    asset: CanonicalAsset,
    new_location_id: str,
    *,
    moved_by: str,
    audit: AuditSink = discard_audit,
    now: datetime | None = None,
) -> CanonicalAsset:
    if asset.is_archived:
        raise ConflictError("Cannot transfer archived asset")
    if not new_location_id.strip():
        raise ValidationError("Location id is required")
    _require_actor(moved_by)

    moment = now or utc_now()
    previous = asset.location_id
    asset.location_history.append(
        LocationChange(
            from_location_id=previous,
            to_location_id=new_location_id,
            moved_by=moved_by,
            moved_at=moment,
        )
    )
    asset.location_id = new_location_id
    asset.touch(moment)
    _record(
        audit,
        asset,
        AuditAction.TRANSFER,
        moved_by,
        moment,
        details={"from_location_id": previous, "to_location_id": new_location_id},
    )
    return asset


def change_status(
    asset: CanonicalAsset,
    status: AssetStatus,
    *,
    actor: str,
    reason: str | None = None,
    audit: AuditSink = discard_audit,
    now: datetime | None = None,
) -> CanonicalAsset:
    if asset.is_archived:
        raise ConflictError("Cannot change status of archived asset")
    if status is AssetStatus.ACTIVE:
        raise StateError("Assets become Active only through assignment")
    if asset.status is AssetStatus.ACTIVE:
        raise StateError("Return the asset before changing its status")
    if status not in STATUS_TRANSITIONS[asset.status]:
        raise StateError(f"Cannot change status from {asset.status} to {status}")
    _require_actor(actor)

    moment = now or utc_now()
    previous = asset.status
    asset.status = status
    asset.touch(moment)
    _record(
        audit,
        asset,
        AuditAction.STATUS_CHANGE,
        actor,
        moment,
        reason=reason,
        details={"from_status": str(previous), "to_status": str(status)},
    )
    return asset


def set_custom_field(
    asset: CanonicalAsset,
    key: str,
    value: CustomFieldValue,
    *,
    field_type: CustomFieldType = CustomFieldType.TEXT,
    actor: str = "system",
    audit: AuditSink = discard_audit,
    now: datetime | None = None,
) -> CanonicalAsset:
    """Upsert a custom field; keys are case-sensitive and the last write wins."""

    if asset.is_archived:
        raise ConflictError("Cannot modify custom fields of archived asset")
    if not key.strip():
        raise ValidationError("Custom field key is required")
    _check_custom_value(key, value, field_type)

    moment = now or utc_now()
    asset.custom_fields = {**asset.custom_fields, key: CustomField(value=value, type=field_type)}
    asset.touch(moment)
    _record(audit, asset, AuditAction.UPDATE, actor, moment, details={"custom_field": key})
    return asset


def remove_custom_field(
    asset: CanonicalAsset,
    key: str,
    *,
    actor: str = "system",
    audit: AuditSink = discard_audit,
    now: datetime | None = None,
) -> CanonicalAsset:
    if asset.is_archived:
        raise ConflictError("Cannot modify custom fields of archived asset")
    if key not in asset.custom_fields:
        raise NotFoundError(f"Custom field {key!r} not found", entity_id=asset.id)

    moment = now or utc_now()
    asset.custom_fields = {
        name: value for name, value in asset.custom_fields.items() if name != key
    }
    asset.touch(moment)
    _record(audit, asset, AuditAction.UPDATE, actor, moment, details={"removed_field": key})
    return asset


def update_asset(
    asset: CanonicalAsset,
    changes: Mapping[str, object],
    *,
    actor: str = "system",
    audit: AuditSink = discard_audit,
    now: datetime | None = None,
) -> CanonicalAsset:
    """Apply plain attribute changes; lifecycle-owned fields are rejected."""

    if asset.is_archived:
        raise ConflictError("Cannot update archived asset")
    rejected = sorted(set(changes) - UPDATABLE_FIELDS)
    if rejected:
        raise ValidationError(f"Fields cannot be updated directly: {', '.join(rejected)}")
    validated = {name: _validate_update(name, value) for name, value in changes.items()}
    if not validated:
        return asset

    moment = now or utc_now()
    for name, value in validated.items():
        setattr(asset, name, value)
    asset.touch(moment)
    _record(
        audit,
        asset,
        AuditAction.UPDATE,
        actor,
        moment,
        details={"fields": ",".join(sorted(validated))},
    )
    return asset


def mark_seen_in_discovery(asset: CanonicalAsset, seen_at: datetime) -> bool:
    """Stamp the latest discovery sighting; archived assets and older sightings are ignored."""

    if asset.is_archived:
        return False
    if asset.last_seen_in_discovery is not None and asset.last_seen_in_discovery >= seen_at:
        return False
    asset.last_seen_in_discovery = seen_at
    asset.touch(utc_now())
    return True


def _validate_update(name: str, value: object) -> object:
    match name:
        case "name":
            if not isinstance(value, str) or not value.strip():
                raise ValidationError("Name is required")
            return value.strip()
        case "serial_number" | "asset_tag" | "manufacturer" | "model" | "category":
            if value is None:
                return None
            if not isinstance(value, str):
                raise ValidationError(f"{name} must be a string")
            return value.strip() or None
        case "purchase_price" | "salvage_value":
            if value is None and name == "purchase_price":
                return None
            if isinstance(value, bool) or not isinstance(value, int | float) or value < 0:
                raise ValidationError(f"{name} must be a non-negative number")
            return float(value)
        case "useful_life":
            if value is None:
                return None
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValidationError("useful_life must be a positive integer")
            return value
        case "purchase_date":
            if value is None or isinstance(value, date):
                return value
            raise ValidationError("purchase_date must be a date")
        case "depreciation_type":
            try:
                return DepreciationType(value)
            except ValueError as exc:
                raise ValidationError(f"Unknown depreciation type: {value!r}") from exc
        case _:
            raise ValidationError(f"Field cannot be updated directly: {name}")


def _check_custom_value(key: str, value: CustomFieldValue, field_type: CustomFieldType) -> None:
    if value is None:
        return
    match field_type:
        case CustomFieldType.BOOLEAN:
            valid = isinstance(value, bool)
        case CustomFieldType.NUMBER:
            valid = isinstance(value, int | float) and not isinstance(value, bool)
        case CustomFieldType.DATE:
            valid = isinstance(value, str) and _is_iso_date(value)
        case CustomFieldType.TEXT:
            valid = isinstance(value, str)
    if not valid:
        raise ValidationError(f"Custom field {key!r} expects a {field_type} value")


def _is_iso_date(value: str) -> bool:
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def _require_actor(actor: str) -> None:
    if not actor.strip():
        raise ValidationError("Actor is required")


def _record(
    audit: AuditSink,
    asset: CanonicalAsset,
    action: AuditAction,
    actor: str,
    moment: datetime,
    *,
    reason: str | None = None,
    details: dict[str, AuditDetailValue] | None = None,
) -> None:
    audit(
        AuditTrailEntry(
            entity_type=asset.entity_type,
            entity_id=asset.id,
            action=action,
            actor=actor,
            reason=reason,
            timestamp=moment,
            details=details or {},
        )
    )
