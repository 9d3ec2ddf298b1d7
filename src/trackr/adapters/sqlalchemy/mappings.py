"""SQLAlchemy mapping metadata for the trackr domain model."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Dialect,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    TypeDecorator,
    Uuid,
    func,
    orm,
)
from sqlalchemy.orm import configure_mappers, relationship

from trackr.domain.model import (
    AssetAssignment,
    AssetStatus,
    AuditAction,
    AuditTrailEntry,
    CanonicalAsset,
    CustomField,
    CustomFieldType,
    DepreciationType,
    EntityType,
    LicenseGrant,
    LicenseStatus,
    LicenseType,
    LocationChange,
    SeatAssignment,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class UserIdSetType(TypeDecorator[frozenset[str]]):
    impl = String
    cache_ok = True

    def process_bind_param(self, value: frozenset[str] | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(sorted(value))

    def process_result_value(self, value: str | None, dialect: Dialect) -> frozenset[str]:
        _ = dialect
        if value is None:
            return frozenset()
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return frozenset()
        items = cast(list[Any], loaded)
        return frozenset(item for item in items if isinstance(item, str))


class CustomFieldsType(TypeDecorator[dict[str, CustomField]]):
    impl = JSON
    cache_ok = True

    def process_bind_param(
        self, value: dict[str, CustomField] | None, dialect: Dialect
    ) -> dict[str, dict[str, Any]] | None:
        _ = dialect
        if value is None:
            return None
        return {
            key: {"value": field.value, "type": field.type.value} for key, field in value.items()
        }

    def process_result_value(
        self, value: dict[str, Any] | None, dialect: Dialect
    ) -> dict[str, CustomField]:
        _ = dialect
        if not value:
            return {}
        fields: dict[str, CustomField] = {}
        for key, raw in value.items():
            if not isinstance(raw, dict):
                continue
            payload = cast(dict[str, Any], raw)
            fields[key] = CustomField(
                value=payload.get("value"),
                type=CustomFieldType(payload.get("type", CustomFieldType.TEXT.value)),
            )
        return fields


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Assets ----------------------------------------------------------------------

asset_table = Table(
    "asset",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("serial_number", String, nullable=True),
    Column("asset_tag", String, nullable=True, unique=True),
    Column("manufacturer", String, nullable=True),
    Column("model", String, nullable=True),
    Column("category", String, nullable=True),
    Column("status", Enum(AssetStatus, native_enum=False, length=32), nullable=False),
    Column("assigned_to", String, nullable=True),
    Column("assigned_date", UTCDateTime(), nullable=True),
    Column("location_id", String, nullable=True),
    Column("last_seen_in_discovery", UTCDateTime(), nullable=True),
    Column("purchase_date", Date, nullable=True),
    Column("purchase_price", Float, nullable=True),
    Column("salvage_value", Float, nullable=False, default=0.0),
    Column("useful_life", Integer, nullable=True),
    Column(
        "depreciation_type",
        Enum(DepreciationType, native_enum=False, length=32),
        nullable=False,
    ),
    Column("custom_fields", CustomFieldsType(), nullable=False, default=dict),
    Column("is_archived", Boolean, nullable=False, default=False),
    Column("archived_at", UTCDateTime(), nullable=True),
    Column("archived_by", String, nullable=True),
    Column("archive_reason", String, nullable=True),
    Column("version", Integer, nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
)

Index(
    "uq_asset_serial_number_lower",
    func.lower(asset_table.c.serial_number),
    unique=True,
)

asset_assignment_table = Table(
    "asset_assignment",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "asset_id",
        UUIDColumnType,
        ForeignKey("asset.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("user_id", String, nullable=False),
    Column("assigned_by", String, nullable=False),
    Column("assigned_date", UTCDateTime(), nullable=False),
    Column("returned_date", UTCDateTime(), nullable=True),
    Column("returned_by", String, nullable=True),
    Column("notes", String, nullable=True),
)

asset_location_change_table = Table(
    "asset_location_change",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "asset_id",
        UUIDColumnType,
        ForeignKey("asset.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("from_location_id", String, nullable=True),
    Column("to_location_id", String, nullable=False),
    Column("moved_by", String, nullable=False),
    Column("moved_at", UTCDateTime(), nullable=False),
)

# Licenses --------------------------------------------------------------------

license_grant_table = Table(
    "license_grant",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("vendor", String, nullable=True),
    Column("license_type", Enum(LicenseType, native_enum=False, length=32), nullable=False),
    Column("category", String, nullable=True),
    Column("total_seats", Integer, nullable=False),
    Column("assigned_to", UserIdSetType(), nullable=False),
    Column("purchase_cost", Float, nullable=False, default=0.0),
    Column("annual_cost", Float, nullable=True),
    Column("purchase_date", UTCDateTime(), nullable=True),
    Column("expiration_date", UTCDateTime(), nullable=True),
    Column("renewal_notification_days", Integer, nullable=False, default=30),
    Column(
        "lifecycle_override",
        Enum(LicenseStatus, native_enum=False, length=32),
        nullable=True,
    ),
    Column("is_archived", Boolean, nullable=False, default=False),
    Column("archived_at", UTCDateTime(), nullable=True),
    Column("archived_by", String, nullable=True),
    Column("archive_reason", String, nullable=True),
    Column("version", Integer, nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
)

license_assignment_table = Table(
    "license_assignment",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "license_id",
        UUIDColumnType,
        ForeignKey("license_grant.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("user_id", String, nullable=False),
    Column("assigned_by", String, nullable=False),
    Column("assigned_date", UTCDateTime(), nullable=False),
    Column("unassigned_date", UTCDateTime(), nullable=True),
    Column("unassigned_by", String, nullable=True),
    Column("reason", String, nullable=True),
    Column("notes", String, nullable=True),
)

# Audit -----------------------------------------------------------------------

audit_entry_table = Table(
    "audit_entry",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("entity_type", Enum(EntityType, native_enum=False, length=32), nullable=False),
    Column("entity_id", UUIDColumnType, nullable=False),
    Column("action", Enum(AuditAction, native_enum=False, length=32), nullable=False),
    Column("actor", String, nullable=False),
    Column("reason", String, nullable=True),
    Column("timestamp", UTCDateTime(), nullable=False),
    Column("details", JSON, nullable=False, default=dict),
)

Index(
    "ix_audit_entry_entity",
    audit_entry_table.c.entity_type,
    audit_entry_table.c.entity_id,
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(AssetAssignment, asset_assignment_table)
    mapper_registry.map_imperatively(LocationChange, asset_location_change_table)
    mapper_registry.map_imperatively(
        CanonicalAsset,
        asset_table,
        # the domain bumps ``version`` itself; a stale row fails the UPDATE
        version_id_col=asset_table.c.version,
        version_id_generator=False,
        properties={
            "assignment_history": relationship(
                AssetAssignment,
                cascade="all, delete-orphan",
                order_by=asset_assignment_table.c.assigned_date,
                lazy="selectin",
            ),
            "location_history": relationship(
                LocationChange,
                cascade="all, delete-orphan",
                order_by=asset_location_change_table.c.moved_at,
                lazy="selectin",
            ),
        },
    )

    mapper_registry.map_imperatively(SeatAssignment, license_assignment_table)
    mapper_registry.map_imperatively(
        LicenseGrant,
        license_grant_table,
        version_id_col=license_grant_table.c.version,
        version_id_generator=False,
        properties={
            "assignment_history": relationship(
                SeatAssignment,
                cascade="all, delete-orphan",
                order_by=license_assignment_table.c.assigned_date,
                lazy="selectin",
            ),
        },
    )

    mapper_registry.map_imperatively(AuditTrailEntry, audit_entry_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create every mapped table directly, bypassing migrations."""

    mapper_registry.metadata.create_all(engine)
