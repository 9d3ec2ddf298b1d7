"""Public domain model surface."""

from __future__ import annotations

from trackr.domain.model.asset import (
    AssetAssignment,
    CanonicalAsset,
    CustomField,
    CustomFieldValue,
    LocationChange,
)
from trackr.domain.model.audit import AuditSink, AuditTrailEntry, discard_audit
from trackr.domain.model.discovery import (
    MAX_PASSTHROUGH_KEYS,
    CsvMetadata,
    DiscoveredRecord,
    DiscoveryMetadata,
    IntuneMetadata,
    JamfMetadata,
    ManualMetadata,
    MdmMetadata,
)
from trackr.domain.model.entity import (
    ArchivableEntity,
    Entity,
    VersionedEntity,
    new_id,
    utc_now,
)
from trackr.domain.model.enums import (
    AssetStatus,
    AuditAction,
    ComplianceStatus,
    CustomFieldType,
    DepreciationType,
    DiscoverySourceType,
    EntityType,
    LicenseStatus,
    LicenseType,
)
from trackr.domain.model.license import LicenseGrant, SeatAssignment

__all__ = [  # noqa: RUF022
    # entity base
    "ArchivableEntity",
    "Entity",
    "VersionedEntity",
    "new_id",
    "utc_now",
    # enums
    "AssetStatus",
    "AuditAction",
    "ComplianceStatus",
    "CustomFieldType",
    "DepreciationType",
    "DiscoverySourceType",
    "EntityType",
    "LicenseStatus",
    "LicenseType",
    # assets
    "AssetAssignment",
    "CanonicalAsset",
    "CustomField",
    "CustomFieldValue",
    "LocationChange",
    # licenses
    "LicenseGrant",
    "SeatAssignment",
    # audit
    "AuditSink",
    "AuditTrailEntry",
    "discard_audit",
    # discovery
    "MAX_PASSTHROUGH_KEYS",
    "CsvMetadata",
    "DiscoveredRecord",
    "DiscoveryMetadata",
    "IntuneMetadata",
    "JamfMetadata",
    "ManualMetadata",
    "MdmMetadata",
]
