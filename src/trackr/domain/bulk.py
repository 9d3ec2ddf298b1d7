"""Batch application of lifecycle and seat-ledger operations.

Every item runs in its own unit of work: a failing item is reported and the
batch moves on, while items that already succeeded stay committed. The only
batch-wide check is the duplicate-serial scan of ``bulk_create``, which runs
over the whole batch before anything is written.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING

from trackr.domain import lifecycle
from trackr.domain.errors import TrackrError, ValidationError
from trackr.domain.licensing import allocate, archive_license, update_license
from trackr.domain.lookups import check_identifier_uniqueness, require_asset, require_license
from trackr.domain.model import (
    AuditAction,
    AuditTrailEntry,
    CanonicalAsset,
    CustomField,
    DepreciationType,
)
from trackr.domain.ports.clock import system_clock
from trackr.domain.similarity import normalize_identifier

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from uuid import UUID

    from trackr.domain.model import LicenseGrant
    from trackr.domain.ports import Clock, InventoryUnitOfWork

log = logging.getLogger(__name__)

type UnitOfWorkFactory = Callable[[], InventoryUnitOfWork]


@dataclass(frozen=True, slots=True, kw_only=True)
class AssetDraft:
    """Intake payload for a new canonical asset."""

    name: str
    serial_number: str | None = None
    asset_tag: str | None = None
    manufacturer: str | None = None
    model: str | None = None
    category: str | None = None
    location_id: str | None = None
    purchase_date: date | None = None
    purchase_price: float | None = None
    salvage_value: float = 0.0
    useful_life: int | None = None
    depreciation_type: DepreciationType = DepreciationType.STRAIGHT_LINE
    custom_fields: Mapping[str, CustomField] = field(default_factory=dict[str, CustomField])

    @property
    def ref(self) -> str:
        return self.serial_number or self.asset_tag or self.name

    def validate(self) -> None:
        if not self.name or not self.name.strip():
            raise ValidationError("Name is required")
        if self.purchase_price is not None and self.purchase_price < 0:
            raise ValidationError("Purchase price cannot be negative")
        if self.salvage_value < 0:
            raise ValidationError("Salvage value cannot be negative")
        if self.useful_life is not None and self.useful_life <= 0:
            raise ValidationError("Useful life must be positive")

    def to_asset(self, *, now: datetime) -> CanonicalAsset:
        return CanonicalAsset(
            name=self.name.strip(),
            serial_number=_clean(self.serial_number),
            asset_tag=_clean(self.asset_tag),
            manufacturer=_clean(self.manufacturer),
            model=_clean(self.model),
            category=_clean(self.category),
            location_id=_clean(self.location_id),
            purchase_date=self.purchase_date,
            purchase_price=self.purchase_price,
            salvage_value=self.salvage_value,
            useful_life=self.useful_life,
            depreciation_type=self.depreciation_type,
            custom_fields=dict(self.custom_fields),
            created_at=now,
            updated_at=now,
        )


@dataclass(frozen=True, slots=True)
class AssetUpdate:
    asset_id: UUID | str
    changes: Mapping[str, object]


@dataclass(frozen=True, slots=True)
class LicenseUpdate:
    license_id: UUID | str
    changes: Mapping[str, object]


@dataclass(frozen=True, slots=True)
class BulkError:
    ref: object
    error: str


@dataclass(slots=True)
class BulkResult[T]:
    items: list[T] = field(default_factory=list)
    errors: list[BulkError] = field(default_factory=list[BulkError])

    @property
    def success(self) -> int:
        return len(self.items)

    @property
    def failed(self) -> int:
        return len(self.errors)


class DuplicateSerialBatchError(ValidationError):
    """A ``bulk_create`` batch repeats a serial number; nothing was written."""

    def __init__(self, serials: Sequence[str]) -> None:
        super().__init__(f"Duplicate serial numbers in batch: {', '.join(serials)}")
        self.serials = tuple(serials)
        self.result: BulkResult[CanonicalAsset] = BulkResult(
            errors=[BulkError(ref=self.serials, error=str(self))]
        )


def register_asset(
    uow: InventoryUnitOfWork,
    draft: AssetDraft,
    *,
    actor: str,
    now: datetime,
) -> CanonicalAsset:
    """Validate ``draft`` and stage a new asset plus its ``create`` audit entry."""

    draft.validate()
    repositories = uow.repositories
    check_identifier_uniqueness(
        repositories,
        {"serial_number": draft.serial_number, "asset_tag": draft.asset_tag},
    )
    asset = draft.to_asset(now=now)
    repositories.assets.add(asset)
    repositories.audit.add(
        AuditTrailEntry(
            entity_type=asset.entity_type,
            entity_id=asset.id,
            action=AuditAction.CREATE,
            actor=actor,
            timestamp=now,
            details={"serial_number": asset.serial_number, "asset_tag": asset.asset_tag},
        )
    )
    return asset


def register_license(
    uow: InventoryUnitOfWork,
    grant: LicenseGrant,
    *,
    actor: str,
    now: datetime,
) -> LicenseGrant:
    """Validate ``grant`` and stage it plus its ``create`` audit entry."""

    if not grant.name.strip():
        raise ValidationError("Name is required")
    if grant.total_seats < 1:
        raise ValidationError("Total seats must be at least 1")
    repositories = uow.repositories
    repositories.licenses.add(grant)
    repositories.audit.add(
        AuditTrailEntry(
            entity_type=grant.entity_type,
            entity_id=grant.id,
            action=AuditAction.CREATE,
            actor=actor,
            timestamp=now,
            details={"total_seats": grant.total_seats},
        )
    )
    return grant


@dataclass(slots=True)
class BulkOperationCoordinator:
    unit_of_work_factory: UnitOfWorkFactory
    max_workers: int = 1
    clock: Clock = system_clock
    actor: str = "bulk"

    def bulk_create(self, items: Sequence[AssetDraft]) -> BulkResult[CanonicalAsset]:
        """Create assets item by item after rejecting batches with repeated serials."""

        duplicates = duplicate_serials_in(items)
        if duplicates:
            log.warning("Rejected bulk create: duplicate serials in batch %s", duplicates)
            raise DuplicateSerialBatchError(duplicates)
        return self._run(items, _draft_ref, self._create_one, "create")

    def bulk_update(self, updates: Sequence[AssetUpdate]) -> BulkResult[CanonicalAsset]:
        return self._run(updates, _update_ref, self._update_one, "update")

    def bulk_archive(
        self,
        asset_ids: Sequence[UUID | str],
        *,
        actor: str,
        reason: str | None = None,
    ) -> BulkResult[CanonicalAsset]:
        def archive_one(asset_id: UUID | str) -> CanonicalAsset:
            with self.unit_of_work_factory() as uow:
                repositories = uow.repositories
                asset = require_asset(repositories, asset_id)
                lifecycle.archive(
                    asset,
                    actor=actor,
                    reason=reason,
                    audit=repositories.audit.add,
                    now=self.clock(),
                )
                uow.commit()
            return asset

        return self._run(asset_ids, _identity_ref, archive_one, "archive")

    def bulk_allocate(
        self,
        license_id: UUID | str,
        user_ids: Sequence[str],
        *,
        allocated_by: str,
    ) -> BulkResult[LicenseGrant]:
        """Allocate one seat per user; each user succeeds or fails on its own."""

        def allocate_one(user_id: str) -> LicenseGrant:
            with self.unit_of_work_factory() as uow:
                repositories = uow.repositories
                grant = require_license(repositories, license_id)
                allocate(
                    grant,
                    user_id,
                    allocated_by=allocated_by,
                    audit=repositories.audit.add,
                    now=self.clock(),
                )
                uow.commit()
            return grant

        # seats are a shared budget on one license
        return self._run(user_ids, _identity_ref, allocate_one, "allocate", workers=1)

    def bulk_create_licenses(self, grants: Sequence[LicenseGrant]) -> BulkResult[LicenseGrant]:
        def create_one(grant: LicenseGrant) -> LicenseGrant:
            with self.unit_of_work_factory() as uow:
                register_license(uow, grant, actor=self.actor, now=self.clock())
                uow.commit()
            return grant

        return self._run(grants, _license_ref, create_one, "license create")

    def bulk_update_licenses(self, updates: Sequence[LicenseUpdate]) -> BulkResult[LicenseGrant]:
        def update_one(update: LicenseUpdate) -> LicenseGrant:
            with self.unit_of_work_factory() as uow:
                repositories = uow.repositories
                grant = require_license(repositories, update.license_id)
                update_license(
                    grant,
                    update.changes,
                    actor=self.actor,
                    audit=repositories.audit.add,
                    now=self.clock(),
                )
                uow.commit()
            return grant

        return self._run(updates, _license_update_ref, update_one, "license update")

    def bulk_archive_licenses(
        self,
        license_ids: Sequence[UUID | str],
        *,
        actor: str,
        reason: str | None = None,
    ) -> BulkResult[LicenseGrant]:
        def archive_one(license_id: UUID | str) -> LicenseGrant:
            with self.unit_of_work_factory() as uow:
                repositories = uow.repositories
                grant = require_license(repositories, license_id)
                archive_license(
                    grant,
                    actor=actor,
                    reason=reason,
                    audit=repositories.audit.add,
                    now=self.clock(),
                )
                uow.commit()
            return grant

        return self._run(license_ids, _identity_ref, archive_one, "license archive")

    def _create_one(self, draft: AssetDraft) -> CanonicalAsset:
        with self.unit_of_work_factory() as uow:
            asset = register_asset(uow, draft, actor=self.actor, now=self.clock())
            uow.commit()
        return asset

    def _update_one(self, update: AssetUpdate) -> CanonicalAsset:
        with self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            asset = require_asset(repositories, update.asset_id)
            if not asset.is_archived:
                check_identifier_uniqueness(repositories, update.changes, asset=asset)
            lifecycle.update_asset(
                asset,
                update.changes,
                actor=self.actor,
                audit=repositories.audit.add,
                now=self.clock(),
            )
            uow.commit()
        return asset

    def _run[TItem, TResult](
        self,
        items: Sequence[TItem],
        ref_of: Callable[[TItem], object],
        operation: Callable[[TItem], TResult],
        label: str,
        *,
        workers: int | None = None,
    ) -> BulkResult[TResult]:
        def attempt(item: TItem) -> TResult | BulkError:
            try:
                return operation(item)
            except TrackrError as exc:
                log.warning("Bulk %s rejected %s: %s", label, ref_of(item), exc)
                return BulkError(ref=ref_of(item), error=str(exc))

        pool_size = self.max_workers if workers is None else workers
        if pool_size > 1 and len(items) > 1:
            with ThreadPoolExecutor(max_workers=pool_size) as executor:
                outcomes = list(executor.map(attempt, items))
        else:
            outcomes = [attempt(item) for item in items]

        result: BulkResult[TResult] = BulkResult()
        for outcome in outcomes:
            if isinstance(outcome, BulkError):
                result.errors.append(outcome)
            else:
                result.items.append(outcome)
        log.info("Bulk %s finished: success=%s, failed=%s", label, result.success, result.failed)
        return result


def duplicate_serials_in(items: Sequence[AssetDraft]) -> list[str]:
    """Normalized serial numbers that occur more than once in ``items``."""

    seen: set[str] = set()
    duplicates: list[str] = []
    for item in items:
        serial = normalize_identifier(item.serial_number)
        if serial is None:
            continue
        if serial in seen and serial not in duplicates:
            duplicates.append(serial)
        seen.add(serial)
    return duplicates


def _draft_ref(draft: AssetDraft) -> object:
    return draft.ref


def _update_ref(update: AssetUpdate) -> object:
    return update.asset_id


def _license_ref(grant: LicenseGrant) -> object:
    return grant.name


def _license_update_ref(update: LicenseUpdate) -> object:
    return update.license_id


def _identity_ref(value: object) -> object:
    return value


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None
