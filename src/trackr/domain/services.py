"""Store-backed single-item operations.

Each call opens a unit of work, loads the target by id, applies one lifecycle
or ledger operation, records its audit entry and commits. Any failure rolls
the unit of work back, so nothing is persisted for a rejected operation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from trackr.domain import licensing, lifecycle
from trackr.domain.bulk import AssetDraft, register_asset, register_license
from trackr.domain.errors import NotFoundError
from trackr.domain.lookups import (
    as_uuid,
    check_identifier_uniqueness,
    require_asset,
    require_license,
)
from trackr.domain.ports.clock import system_clock
from trackr.domain.ports.directory import AcceptAllDirectory

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence
    from datetime import datetime
    from uuid import UUID

    from trackr.domain.lifecycle import DepreciationResult
    from trackr.domain.model import (
        AssetStatus,
        AuditTrailEntry,
        CanonicalAsset,
        CustomFieldType,
        CustomFieldValue,
        EntityType,
        LicenseGrant,
        LicenseStatus,
    )
    from trackr.domain.ports import Clock, InventoryUnitOfWork, UserDirectory
    from trackr.domain.reconciliation import ReconciliationMatch

log = logging.getLogger(__name__)

type UnitOfWorkFactory = Callable[[], InventoryUnitOfWork]


@dataclass(slots=True)
class InventoryService:
    unit_of_work_factory: UnitOfWorkFactory
    directory: UserDirectory = field(default_factory=AcceptAllDirectory)
    clock: Clock = system_clock

    # Assets -----------------------------------------------------------------

    def register_asset(self, draft: AssetDraft, *, actor: str) -> CanonicalAsset:
        with self.unit_of_work_factory() as uow:
            asset = register_asset(uow, draft, actor=actor, now=self.clock())
            uow.commit()
        log.info("Registered asset %s (%s)", asset.id, asset.name)
        return asset

    def get_asset(self, asset_id: UUID | str) -> CanonicalAsset:
        with self.unit_of_work_factory() as uow:
            return require_asset(uow.repositories, asset_id)

    def list_assets(self, *, include_archived: bool = True) -> Sequence[CanonicalAsset]:
        with self.unit_of_work_factory() as uow:
            return uow.repositories.assets.list(include_archived=include_archived)

    def archive_asset(
        self, asset_id: UUID | str, *, actor: str, reason: str | None = None
    ) -> CanonicalAsset:
        with self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            asset = require_asset(repositories, asset_id)
            lifecycle.archive(
                asset, actor=actor, reason=reason, audit=repositories.audit.add, now=self.clock()
            )
            uow.commit()
        return asset

    def restore_asset(self, asset_id: UUID | str, *, actor: str) -> CanonicalAsset:
        with self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            asset = require_asset(repositories, asset_id)
            lifecycle.restore(asset, actor=actor, audit=repositories.audit.add, now=self.clock())
            uow.commit()
        return asset

    def assign_asset(
        self,
        asset_id: UUID | str,
        user_id: str,
        *,
        assigned_by: str,
        notes: str | None = None,
    ) -> CanonicalAsset:
        with self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            asset = require_asset(repositories, asset_id)
            self._require_user(user_id)
            lifecycle.assign(
                asset,
                user_id,
                assigned_by=assigned_by,
                notes=notes,
                audit=repositories.audit.add,
                now=self.clock(),
            )
            uow.commit()
        return asset

    def return_asset(
        self, asset_id: UUID | str, *, returned_by: str, notes: str | None = None
    ) -> CanonicalAsset:
        with self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            asset = require_asset(repositories, asset_id)
            lifecycle.return_asset(
                asset,
                returned_by=returned_by,
                notes=notes,
                audit=repositories.audit.add,
                now=self.clock(),
            )
            uow.commit()
        return asset

    def transfer_asset(
        self, asset_id: UUID | str, new_location_id: str, *, moved_by: str
    ) -> CanonicalAsset:
        with self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            asset = require_asset(repositories, asset_id)
            lifecycle.transfer(
                asset,
                new_location_id,
                moved_by=moved_by,
                audit=repositories.audit.add,
                now=self.clock(),
            )
            uow.commit()
        return asset

    def change_asset_status(
        self,
        asset_id: UUID | str,
        status: AssetStatus,
        *,
        actor: str,
        reason: str | None = None,
    ) -> CanonicalAsset:
        with self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            asset = require_asset(repositories, asset_id)
            lifecycle.change_status(
                asset,
                status,
                actor=actor,
                reason=reason,
                audit=repositories.audit.add,
                now=self.clock(),
            )
            uow.commit()
        return asset

    def update_asset(
        self, asset_id: UUID | str, changes: Mapping[str, object], *, actor: str
    ) -> CanonicalAsset:
        with self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            asset = require_asset(repositories, asset_id)
            if not asset.is_archived:
                check_identifier_uniqueness(repositories, changes, asset=asset)
            lifecycle.update_asset(
                asset, changes, actor=actor, audit=repositories.audit.add, now=self.clock()
            )
            uow.commit()
        return asset

    def set_custom_field(
        self,
        asset_id: UUID | str,
        key: str,
        value: CustomFieldValue,
        *,
        field_type: CustomFieldType,
        actor: str,
    ) -> CanonicalAsset:
        with self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            asset = require_asset(repositories, asset_id)
            lifecycle.set_custom_field(
                asset,
                key,
                value,
                field_type=field_type,
                actor=actor,
                audit=repositories.audit.add,
                now=self.clock(),
            )
            uow.commit()
        return asset

    def remove_custom_field(
        self, asset_id: UUID | str, key: str, *, actor: str
    ) -> CanonicalAsset:
        with self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            asset = require_asset(repositories, asset_id)
            lifecycle.remove_custom_field(
                asset, key, actor=actor, audit=repositories.audit.add, now=self.clock()
            )
            uow.commit()
        return asset

    def asset_depreciation(self, asset_id: UUID | str) -> DepreciationResult:
        asset = self.get_asset(asset_id)
        return lifecycle.calculate_depreciation(asset, now=self.clock())

    def acknowledge_matches(
        self, matches: Iterable[ReconciliationMatch], *, seen_at: datetime | None = None
    ) -> int:
        """Stamp ``last_seen_in_discovery`` on every matched, non-archived asset."""

        # several records may claim one asset; keep the newest sighting
        asset_ids: dict[UUID, datetime] = {}
        for match in matches:
            asset_id = match.canonical.id
            last_seen = match.discovered.last_seen
            if asset_id not in asset_ids or last_seen > asset_ids[asset_id]:
                asset_ids[asset_id] = last_seen
        touched = 0
        with self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            for asset_id, last_seen in asset_ids.items():
                asset = repositories.assets.get(asset_id)
                if asset is None:
                    log.debug("Skipping acknowledgement of unknown asset %s", asset_id)
                    continue
                if lifecycle.mark_seen_in_discovery(asset, seen_at or last_seen):
                    touched += 1
            uow.commit()
        log.info("Acknowledged discovery for %s of %s matched asset(s)", touched, len(asset_ids))
        return touched

    # Licenses ---------------------------------------------------------------

    def register_license(self, grant: LicenseGrant, *, actor: str) -> LicenseGrant:
        with self.unit_of_work_factory() as uow:
            register_license(uow, grant, actor=actor, now=self.clock())
            uow.commit()
        return grant

    def get_license(self, license_id: UUID | str) -> LicenseGrant:
        with self.unit_of_work_factory() as uow:
            return require_license(uow.repositories, license_id)

    def list_licenses(self, *, include_archived: bool = True) -> Sequence[LicenseGrant]:
        with self.unit_of_work_factory() as uow:
            return uow.repositories.licenses.list(include_archived=include_archived)

    def allocate_seat(
        self,
        license_id: UUID | str,
        user_id: str,
        *,
        allocated_by: str,
        notes: str | None = None,
    ) -> LicenseGrant:
        with self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            grant = require_license(repositories, license_id)
            self._require_user(user_id)
            licensing.allocate(
                grant,
                user_id,
                allocated_by=allocated_by,
                notes=notes,
                audit=repositories.audit.add,
                now=self.clock(),
            )
            uow.commit()
        return grant

    def deallocate_seat(
        self,
        license_id: UUID | str,
        user_id: str,
        *,
        actor: str,
        reason: str | None = None,
    ) -> LicenseGrant:
        with self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            grant = require_license(repositories, license_id)
            licensing.deallocate(
                grant,
                user_id,
                reason=reason,
                actor=actor,
                audit=repositories.audit.add,
                now=self.clock(),
            )
            uow.commit()
        return grant

    def archive_license(
        self, license_id: UUID | str, *, actor: str, reason: str | None = None
    ) -> LicenseGrant:
        with self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            grant = require_license(repositories, license_id)
            licensing.archive_license(
                grant, actor=actor, reason=reason, audit=repositories.audit.add, now=self.clock()
            )
            uow.commit()
        return grant

    def restore_license(self, license_id: UUID | str, *, actor: str) -> LicenseGrant:
        with self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            grant = require_license(repositories, license_id)
            licensing.restore_license(
                grant, actor=actor, audit=repositories.audit.add, now=self.clock()
            )
            uow.commit()
        return grant

    def resize_license(
        self,
        license_id: UUID | str,
        total_seats: int,
        *,
        actor: str,
        reason: str | None = None,
    ) -> LicenseGrant:
        with self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            grant = require_license(repositories, license_id)
            licensing.resize(
                grant,
                total_seats,
                actor=actor,
                reason=reason,
                audit=repositories.audit.add,
                now=self.clock(),
            )
            uow.commit()
        return grant

    def update_license(
        self, license_id: UUID | str, changes: Mapping[str, object], *, actor: str
    ) -> LicenseGrant:
        with self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            grant = require_license(repositories, license_id)
            licensing.update_license(
                grant, changes, actor=actor, audit=repositories.audit.add, now=self.clock()
            )
            uow.commit()
        return grant

    def set_license_override(
        self,
        license_id: UUID | str,
        override: LicenseStatus | None,
        *,
        actor: str,
        reason: str | None = None,
    ) -> LicenseGrant:
        with self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            grant = require_license(repositories, license_id)
            licensing.set_lifecycle_override(
                grant,
                override,
                actor=actor,
                reason=reason,
                audit=repositories.audit.add,
                now=self.clock(),
            )
            uow.commit()
        return grant

    # Audit ------------------------------------------------------------------

    def audit_trail(
        self, entity_type: EntityType, entity_id: UUID | str
    ) -> Sequence[AuditTrailEntry]:
        with self.unit_of_work_factory() as uow:
            return uow.repositories.audit.for_entity(
                entity_type, as_uuid(entity_id, not_found="Entity not found")
            )

    def _require_user(self, user_id: str) -> None:
        if not self.directory.exists(user_id):
            raise NotFoundError("User not found", entity_id=user_id)
