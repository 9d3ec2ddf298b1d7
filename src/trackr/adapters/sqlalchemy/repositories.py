"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from sqlalchemy import func, select

from trackr.adapters.sqlalchemy.mappings import (
    asset_table,
    audit_entry_table,
    license_grant_table,
)
from trackr.domain.model import AuditTrailEntry, CanonicalAsset, LicenseGrant
from trackr.domain.similarity import normalize_identifier

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.orm import Session

    from trackr.domain.model import EntityType


class SqlAlchemyAssetRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: CanonicalAsset) -> None:
        self.session.add(entity)

    def get(self, asset_id: UUID) -> CanonicalAsset | None:
        return self.session.get(CanonicalAsset, asset_id)

    def find_by_serial(self, serial_number: str) -> CanonicalAsset | None:
        normalized = normalize_identifier(serial_number)
        if normalized is None:
            return None
        stmt = select(CanonicalAsset).where(func.lower(asset_table.c.serial_number) == normalized)
        return self.session.execute(stmt).scalars().first()

    def find_by_asset_tag(self, asset_tag: str) -> CanonicalAsset | None:
        tag = asset_tag.strip()
        if not tag:
            return None
        stmt = select(CanonicalAsset).where(asset_table.c.asset_tag == tag)
        return self.session.execute(stmt).scalars().first()

    def list(self, *, include_archived: bool = True) -> Sequence[CanonicalAsset]:
        stmt = select(CanonicalAsset).order_by(asset_table.c.created_at, asset_table.c.id)
        if not include_archived:
            stmt = stmt.where(asset_table.c.is_archived.is_(False))
        return self.session.execute(stmt).scalars().all()

    def count(self, *, include_archived: bool = True) -> int:
        stmt = select(func.count()).select_from(asset_table)
        if not include_archived:
            stmt = stmt.where(asset_table.c.is_archived.is_(False))
        return self.session.execute(stmt).scalar_one()


class SqlAlchemyLicenseRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: LicenseGrant) -> None:
        self.session.add(entity)

    def get(self, license_id: UUID) -> LicenseGrant | None:
        return self.session.get(LicenseGrant, license_id)

    def list(self, *, include_archived: bool = True) -> Sequence[LicenseGrant]:
        stmt = select(LicenseGrant).order_by(
            license_grant_table.c.created_at, license_grant_table.c.id
        )
        if not include_archived:
            stmt = stmt.where(license_grant_table.c.is_archived.is_(False))
        return self.session.execute(stmt).scalars().all()


class SqlAlchemyAuditRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: AuditTrailEntry) -> None:
        self.session.add(entity)

    def for_entity(self, entity_type: EntityType, entity_id: UUID) -> Sequence[AuditTrailEntry]:
        stmt = (
            select(AuditTrailEntry)
            .where(
                audit_entry_table.c.entity_type == entity_type,
                audit_entry_table.c.entity_id == entity_id,
            )
            .order_by(audit_entry_table.c.timestamp)
        )
        return self.session.execute(stmt).scalars().all()
