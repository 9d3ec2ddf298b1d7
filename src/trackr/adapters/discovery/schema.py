"""Pydantic models describing device payloads reported by discovery sources."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _assume_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class DiscoveryBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class MdmDevicePayload(DiscoveryBaseModel):
    """Generic MDM inventory row."""

    device_id: str = Field(validation_alias=AliasChoices("device_id", "deviceId", "id"))
    device_name: str = Field(validation_alias=AliasChoices("device_name", "deviceName", "name"))
    serial_number: str | None = Field(
        default=None, validation_alias=AliasChoices("serial_number", "serialNumber")
    )
    manufacturer: str | None = None
    model: str | None = None
    last_seen: datetime | None = Field(
        default=None, validation_alias=AliasChoices("last_seen", "lastSeen", "last_check_in")
    )
    os_version: str | None = Field(
        default=None, validation_alias=AliasChoices("os_version", "osVersion")
    )
    enrolled_user: str | None = Field(
        default=None, validation_alias=AliasChoices("enrolled_user", "enrolledUser", "user")
    )
    compliance_state: str | None = Field(
        default=None, validation_alias=AliasChoices("compliance_state", "complianceState")
    )

    _normalize_optional = field_validator(
        "serial_number",
        "manufacturer",
        "model",
        "os_version",
        "enrolled_user",
        "compliance_state",
        mode="before",
    )(_blank_to_none)
    _normalize_last_seen = field_validator("last_seen")(_assume_utc)


class IntuneDevicePayload(DiscoveryBaseModel):
    """Microsoft Graph ``managedDevice`` subset."""

    id: str
    device_name: str = Field(alias="deviceName")
    serial_number: str | None = Field(default=None, alias="serialNumber")
    manufacturer: str | None = None
    model: str | None = None
    last_sync: datetime | None = Field(default=None, alias="lastSyncDateTime")
    azure_device_id: str | None = Field(default=None, alias="azureADDeviceId")
    os_version: str | None = Field(default=None, alias="osVersion")
    user_principal_name: str | None = Field(default=None, alias="userPrincipalName")
    compliance_state: str | None = Field(default=None, alias="complianceState")

    _normalize_optional = field_validator(
        "serial_number",
        "manufacturer",
        "model",
        "azure_device_id",
        "os_version",
        "user_principal_name",
        "compliance_state",
        mode="before",
    )(_blank_to_none)
    _normalize_last_sync = field_validator("last_sync")(_assume_utc)


class JamfComputerPayload(DiscoveryBaseModel):
    """Jamf Pro computer inventory record (general section, flattened)."""

    id: str
    name: str
    serial_number: str | None = Field(default=None, alias="serialNumber")
    udid: str | None = None
    model: str | None = None
    last_contact: datetime | None = Field(default=None, alias="lastContactTime")
    os_version: str | None = Field(default=None, alias="osVersion")
    department: str | None = None
    username: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        # Jamf reports numeric ids
        if isinstance(value, int):
            return str(value)
        return value

    _normalize_optional = field_validator(
        "serial_number",
        "udid",
        "model",
        "os_version",
        "department",
        "username",
        mode="before",
    )(_blank_to_none)
    _normalize_last_contact = field_validator("last_contact")(_assume_utc)


class CsvRowPayload(DiscoveryBaseModel):
    """One row of an inventory spreadsheet export."""

    name: str
    serial_number: str | None = None
    manufacturer: str | None = None
    model: str | None = None
    last_seen: datetime | None = None
    row_number: int | None = None
    file_name: str | None = None

    _normalize_optional = field_validator(
        "serial_number",
        "manufacturer",
        "model",
        "file_name",
        "last_seen",
        "row_number",
        mode="before",
    )(_blank_to_none)
    _normalize_last_seen = field_validator("last_seen")(_assume_utc)


class ManualEntryPayload(DiscoveryBaseModel):
    name: str
    serial_number: str | None = None
    manufacturer: str | None = None
    model: str | None = None
    entered_by: str | None = None
    last_seen: datetime | None = None

    _normalize_optional = field_validator(
        "serial_number",
        "manufacturer",
        "model",
        "entered_by",
        "last_seen",
        mode="before",
    )(_blank_to_none)
    _normalize_last_seen = field_validator("last_seen")(_assume_utc)


type DiscoveryPayload = (
    MdmDevicePayload
    | IntuneDevicePayload
    | JamfComputerPayload
    | CsvRowPayload
    | ManualEntryPayload
)
