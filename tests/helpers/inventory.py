"""Builders and in-memory fakes for inventory tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Literal

from trackr.domain.model import (
    AssetStatus,
    AuditTrailEntry,
    CanonicalAsset,
    DiscoveredRecord,
    LicenseGrant,
    LicenseType,
)
from trackr.domain.ports import InventoryRepositories
from trackr.domain.similarity import normalize_identifier

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from types import TracebackType
    from uuid import UUID

    from trackr.domain.model import DiscoveryMetadata, EntityType

FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


def fixed_clock() -> datetime:
    return FIXED_NOW


def make_asset(
    name: str = "Dell Latitude 5540",
    *,
    serial_number: str | None = "SN-0001",
    asset_tag: str | None = None,
    manufacturer: str | None = "Dell",
    model: str | None = "Latitude 5540",
    status: AssetStatus = AssetStatus.IN_STOCK,
    last_seen_in_discovery: datetime | None = None,
    **overrides: object,
) -> CanonicalAsset:
    asset = CanonicalAsset(
        name=name,
        serial_number=serial_number,
        asset_tag=asset_tag,
        manufacturer=manufacturer,
        model=model,
        status=status,
        last_seen_in_discovery=last_seen_in_discovery,
        created_at=FIXED_NOW,
        updated_at=FIXED_NOW,
    )
    for attribute, value in overrides.items():
        setattr(asset, attribute, value)
    return asset


def make_license(
    name: str = "Office 365 E3",
    *,
    total_seats: int = 10,
    assigned_to: Iterable[str] = (),
    license_type: LicenseType = LicenseType.SUBSCRIPTION,
    purchase_cost: float = 0.0,
    annual_cost: float | None = None,
    expiration_date: datetime | None = None,
    **overrides: object,
) -> LicenseGrant:
    grant = LicenseGrant(
        name=name,
        total_seats=total_seats,
        assigned_to=frozenset(assigned_to),
        license_type=license_type,
        purchase_cost=purchase_cost,
        annual_cost=annual_cost,
        expiration_date=expiration_date,
        created_at=FIXED_NOW,
        updated_at=FIXED_NOW,
    )
    for attribute, value in overrides.items():
        setattr(grant, attribute, value)
    return grant


def make_discovered(
    name: str = "Latitude 5540",
    *,
    serial_number: str | None = "sn-0001",
    manufacturer: str | None = "Dell",
    model: str | None = "Latitude 5540",
    external_id: str = "device-1",
    source_id: str = "intune-prod",
    last_seen: datetime = FIXED_NOW,
    metadata: DiscoveryMetadata | None = None,
) -> DiscoveredRecord:
    if metadata is None:
        return DiscoveredRecord(
            source_id=source_id,
            external_id=external_id,
            name=name,
            serial_number=serial_number,
            manufacturer=manufacturer,
            model=model,
            last_seen=last_seen,
        )
    return DiscoveredRecord(
        source_id=source_id,
        external_id=external_id,
        name=name,
        serial_number=serial_number,
        manufacturer=manufacturer,
        model=model,
        last_seen=last_seen,
        metadata=metadata,
    )


class AuditCollector:
    """Audit sink that keeps every entry it receives."""

    def __init__(self) -> None:
        self.entries: list[AuditTrailEntry] = []

    def __call__(self, entry: AuditTrailEntry) -> None:
        self.entries.append(entry)


class FakeAssetRepository:
    def __init__(self, assets: Iterable[CanonicalAsset] = ()) -> None:
        self.items: dict[UUID, CanonicalAsset] = {asset.id: asset for asset in assets}

    def add(self, entity: CanonicalAsset) -> None:
        self.items[entity.id] = entity

    def get(self, asset_id: UUID) -> CanonicalAsset | None:
        return self.items.get(asset_id)

    def find_by_serial(self, serial_number: str) -> CanonicalAsset | None:
        wanted = normalize_identifier(serial_number)
        for asset in self.items.values():
            if wanted is not None and asset.normalized_serial == wanted:
                return asset
        return None

    def find_by_asset_tag(self, asset_tag: str) -> CanonicalAsset | None:
        for asset in self.items.values():
            if asset.asset_tag == asset_tag.strip():
                return asset
        return None

    def list(self, *, include_archived: bool = True) -> Sequence[CanonicalAsset]:
        return [
            asset for asset in self.items.values() if include_archived or not asset.is_archived
        ]

    def count(self, *, include_archived: bool = True) -> int:
        return len(self.list(include_archived=include_archived))


class FakeLicenseRepository:
    def __init__(self, licenses: Iterable[LicenseGrant] = ()) -> None:
        self.items: dict[UUID, LicenseGrant] = {grant.id: grant for grant in licenses}

    def add(self, entity: LicenseGrant) -> None:
        self.items[entity.id] = entity

    def get(self, license_id: UUID) -> LicenseGrant | None:
        return self.items.get(license_id)

    def list(self, *, include_archived: bool = True) -> Sequence[LicenseGrant]:
        return [
            grant for grant in self.items.values() if include_archived or not grant.is_archived
        ]


class FakeAuditRepository:
    def __init__(self) -> None:
        self.entries: list[AuditTrailEntry] = []

    def add(self, entity: AuditTrailEntry) -> None:
        self.entries.append(entity)

    def for_entity(self, entity_type: EntityType, entity_id: UUID) -> Sequence[AuditTrailEntry]:
        return [
            entry
            for entry in self.entries
            if entry.entity_type == entity_type and entry.entity_id == entity_id
        ]


@dataclass
class FakeInventoryUnitOfWork:
    """Shares one set of repositories across every unit of work it hands out."""

    repositories: InventoryRepositories = field(
        default_factory=lambda: InventoryRepositories(
            assets=FakeAssetRepository(),
            licenses=FakeLicenseRepository(),
            audit=FakeAuditRepository(),
        )
    )
    commits: int = 0
    rollbacks: int = 0

    def __enter__(self) -> FakeInventoryUnitOfWork:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        return False

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1

    def __call__(self) -> FakeInventoryUnitOfWork:
        return self

    @property
    def audit_entries(self) -> list[AuditTrailEntry]:
        audit = self.repositories.audit
        assert isinstance(audit, FakeAuditRepository)
        return audit.entries
