"""Ports for persisting domain aggregates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from trackr.domain.model import AuditTrailEntry, CanonicalAsset, LicenseGrant

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from trackr.domain.model import EntityType


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class AssetRepository(Repository[CanonicalAsset], Protocol):
    """Persistence contract for canonical assets.

    Serial lookups are case-insensitive; the store enforces uniqueness of
    serial numbers and asset tags.
    """

    def get(self, asset_id: UUID) -> CanonicalAsset | None: ...

    def find_by_serial(self, serial_number: str) -> CanonicalAsset | None: ...

    def find_by_asset_tag(self, asset_tag: str) -> CanonicalAsset | None: ...

    def list(self, *, include_archived: bool = True) -> Sequence[CanonicalAsset]: ...

    def count(self, *, include_archived: bool = True) -> int: ...


@runtime_checkable
class LicenseRepository(Repository[LicenseGrant], Protocol):
    """Persistence contract for license grants."""

    def get(self, license_id: UUID) -> LicenseGrant | None: ...

    def list(self, *, include_archived: bool = True) -> Sequence[LicenseGrant]: ...


@runtime_checkable
class AuditRepository(Repository[AuditTrailEntry], Protocol):
    """Append-only audit trail."""

    def for_entity(
        self, entity_type: EntityType, entity_id: UUID
    ) -> Sequence[AuditTrailEntry]: ...
