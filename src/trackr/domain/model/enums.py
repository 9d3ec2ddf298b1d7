"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityType(StrEnum):
    """Typed-reference discriminator for audit entries."""

    ASSET = "asset"
    LICENSE = "license"


class AssetStatus(StrEnum):
    IN_STOCK = "In Stock"
    ACTIVE = "Active"
    REPAIR = "Repair"
    RETIRED = "Retired"


class DepreciationType(StrEnum):
    STRAIGHT_LINE = "Straight Line"
    DOUBLE_DECLINING = "Double Declining"
    SUM_OF_YEARS = "Sum of Years"


class CustomFieldType(StrEnum):
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"


class LicenseType(StrEnum):
    PERPETUAL = "perpetual"
    SUBSCRIPTION = "subscription"
    TRIAL = "trial"
    SITE = "site"
    VOLUME = "volume"
    OEM = "oem"


class LicenseStatus(StrEnum):
    """Date-driven lifecycle of a license; cancelled/suspended are operator overrides."""

    ACTIVE = "active"
    EXPIRING = "expiring"
    EXPIRED = "expired"
    CANCELLED = "cancelled"
    SUSPENDED = "suspended"


class ComplianceStatus(StrEnum):
    COMPLIANT = "compliant"
    OVER_ALLOCATED = "overAllocated"
    UNDER_UTILIZED = "underUtilized"
    AT_RISK = "at-risk"


class AuditAction(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    ARCHIVE = "archive"
    RESTORE = "restore"
    ASSIGN = "assign"
    RETURN = "return"
    TRANSFER = "transfer"
    STATUS_CHANGE = "status_change"
    ALLOCATE = "allocate"
    DEALLOCATE = "deallocate"


class DiscoverySourceType(StrEnum):
    MDM = "mdm"
    INTUNE = "intune"
    JAMF = "jamf"
    CSV = "csv"
    MANUAL = "manual"
