"""Translate discovery source payloads into domain ``DiscoveredRecord`` values."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError as PydanticValidationError

from trackr.domain.errors import ValidationError
from trackr.domain.model import (
    MAX_PASSTHROUGH_KEYS,
    CsvMetadata,
    DiscoveredRecord,
    DiscoverySourceType,
    IntuneMetadata,
    JamfMetadata,
    ManualMetadata,
    MdmMetadata,
    utc_now,
)

from .schema import (
    CsvRowPayload,
    DiscoveryBaseModel,
    IntuneDevicePayload,
    JamfComputerPayload,
    ManualEntryPayload,
    MdmDevicePayload,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from datetime import datetime

    from trackr.domain.model.discovery import PassthroughValue

log = getLogger(__name__)

PAYLOAD_MODELS: dict[DiscoverySourceType, type[DiscoveryBaseModel]] = {
    DiscoverySourceType.MDM: MdmDevicePayload,
    DiscoverySourceType.INTUNE: IntuneDevicePayload,
    DiscoverySourceType.JAMF: JamfComputerPayload,
    DiscoverySourceType.CSV: CsvRowPayload,
    DiscoverySourceType.MANUAL: ManualEntryPayload,
}


def translate_payload(
    source_type: DiscoverySourceType | str,
    source_id: str,
    payload: Mapping[str, object],
    *,
    now: datetime | None = None,
) -> DiscoveredRecord:
    """Validate one raw payload and build the matching discovered record.

    Keys the source model does not consume are carried as passthrough when
    they hold scalars; anything past the passthrough limit is dropped.
    """

    kind = _source_type(source_type)
    model = PAYLOAD_MODELS[kind]
    try:
        parsed = model.model_validate(dict(payload))
    except PydanticValidationError as exc:
        raise ValidationError(
            f"Invalid {kind} payload from {source_id}: {exc.error_count()} error(s)"
        ) from exc

    moment = now or utc_now()
    passthrough = _passthrough(payload, model)
    match parsed:
        case MdmDevicePayload():
            return DiscoveredRecord(
                source_id=source_id,
                external_id=parsed.device_id,
                name=parsed.device_name,
                serial_number=parsed.serial_number,
                manufacturer=parsed.manufacturer,
                model=parsed.model,
                last_seen=parsed.last_seen or moment,
                metadata=MdmMetadata(
                    os_version=parsed.os_version,
                    enrolled_user=parsed.enrolled_user,
                    compliance_state=parsed.compliance_state,
                ),
                passthrough=passthrough,
            )
        case IntuneDevicePayload():
            return DiscoveredRecord(
                source_id=source_id,
                external_id=parsed.id,
                name=parsed.device_name,
                serial_number=parsed.serial_number,
                manufacturer=parsed.manufacturer,
                model=parsed.model,
                last_seen=parsed.last_sync or moment,
                metadata=IntuneMetadata(
                    azure_device_id=parsed.azure_device_id,
                    os_version=parsed.os_version,
                    user_principal_name=parsed.user_principal_name,
                    compliance_state=parsed.compliance_state,
                ),
                passthrough=passthrough,
            )
        case JamfComputerPayload():
            return DiscoveredRecord(
                source_id=source_id,
                external_id=parsed.id,
                name=parsed.name,
                serial_number=parsed.serial_number,
                # Jamf only manages Apple hardware
                manufacturer="Apple",
                model=parsed.model,
                last_seen=parsed.last_contact or moment,
                metadata=JamfMetadata(
                    udid=parsed.udid,
                    os_version=parsed.os_version,
                    department=parsed.department,
                    username=parsed.username,
                ),
                passthrough=passthrough,
            )
        case CsvRowPayload():
            return DiscoveredRecord(
                source_id=source_id,
                external_id=_csv_external_id(parsed),
                name=parsed.name,
                serial_number=parsed.serial_number,
                manufacturer=parsed.manufacturer,
                model=parsed.model,
                last_seen=parsed.last_seen or moment,
                metadata=CsvMetadata(file_name=parsed.file_name, row_number=parsed.row_number),
                passthrough=passthrough,
            )
        case ManualEntryPayload():
            return DiscoveredRecord(
                source_id=source_id,
                external_id=parsed.serial_number or parsed.name,
                name=parsed.name,
                serial_number=parsed.serial_number,
                manufacturer=parsed.manufacturer,
                model=parsed.model,
                last_seen=parsed.last_seen or moment,
                metadata=ManualMetadata(entered_by=parsed.entered_by),
                passthrough=passthrough,
            )
        case _:  # pragma: no cover
            raise ValidationError(f"Unsupported discovery payload {type(parsed).__name__}")


def translate_batch(
    source_type: DiscoverySourceType | str,
    source_id: str,
    payloads: Iterable[Mapping[str, object]],
    *,
    now: datetime | None = None,
) -> list[DiscoveredRecord]:
    """Translate a whole sync; one invalid payload rejects the batch."""

    moment = now or utc_now()
    records = [translate_payload(source_type, source_id, item, now=moment) for item in payloads]
    log.debug("Translated %s %s payload(s) from %s", len(records), source_type, source_id)
    return records


def _source_type(value: DiscoverySourceType | str) -> DiscoverySourceType:
    try:
        return DiscoverySourceType(value)
    except ValueError as exc:
        raise ValidationError(f"Unknown discovery source type: {value!r}") from exc


def _consumed_keys(model: type[DiscoveryBaseModel]) -> set[str]:
    keys: set[str] = set()
    for name, info in model.model_fields.items():
        keys.add(name)
        if info.alias:
            keys.add(info.alias)
        choices = getattr(info.validation_alias, "choices", None)
        if choices:
            keys.update(choice for choice in choices if isinstance(choice, str))
    return keys


def _passthrough(
    payload: Mapping[str, object], model: type[DiscoveryBaseModel]
) -> dict[str, PassthroughValue]:
    consumed = _consumed_keys(model)
    extras: dict[str, PassthroughValue] = {}
    for key in sorted(payload):
        if key in consumed:
            continue
        value = payload[key]
        if value is not None and not isinstance(value, str | int | float | bool):
            continue
        if len(extras) >= MAX_PASSTHROUGH_KEYS:
            log.debug("Dropping passthrough key %s beyond limit %s", key, MAX_PASSTHROUGH_KEYS)
            continue
        extras[key] = value
    return extras


def _csv_external_id(row: CsvRowPayload) -> str:
    if row.row_number is not None:
        return f"{row.file_name or 'csv'}:{row.row_number}"
    return row.serial_number or row.name
