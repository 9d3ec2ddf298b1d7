from __future__ import annotations

import dataclasses

import pytest

from tests.helpers.inventory import FIXED_NOW
from trackr.domain.errors import ValidationError
from trackr.domain.model import (
    MAX_PASSTHROUGH_KEYS,
    DiscoveredRecord,
    DiscoverySourceType,
    IntuneMetadata,
    JamfMetadata,
)


def _record(**overrides: object) -> DiscoveredRecord:
    values: dict[str, object] = {
        "source_id": "intune-prod",
        "external_id": "abc",
        "name": "Latitude 5540",
        "last_seen": FIXED_NOW,
        "serial_number": "  SN-0001 ",
    }
    values.update(overrides)
    return DiscoveredRecord(**values)  # type: ignore[arg-type]


def test_source_type_follows_metadata_variant() -> None:
    assert _record().source_type is DiscoverySourceType.MANUAL
    assert _record(metadata=IntuneMetadata(os_version="14")).source_type is (
        DiscoverySourceType.INTUNE
    )
    assert _record(metadata=JamfMetadata()).source_type is DiscoverySourceType.JAMF


def test_normalized_serial_is_trimmed_and_lowercase() -> None:
    assert _record().normalized_serial == "sn-0001"
    assert _record(serial_number="").normalized_serial is None


def test_passthrough_is_read_only_copy() -> None:
    source = {"battery": 87, "encrypted": True}
    record = _record(passthrough=source)
    source["battery"] = 10

    assert record.passthrough["battery"] == 87
    with pytest.raises(TypeError):
        record.passthrough["battery"] = 1  # type: ignore[index]


def test_passthrough_rejects_too_many_keys() -> None:
    oversized = {f"key{index}": index for index in range(MAX_PASSTHROUGH_KEYS + 1)}

    with pytest.raises(ValidationError):
        _record(passthrough=oversized)


def test_passthrough_rejects_nested_values() -> None:
    with pytest.raises(ValidationError):
        _record(passthrough={"disks": ["ssd"]})


def test_records_are_immutable() -> None:
    record = _record()

    with pytest.raises(dataclasses.FrozenInstanceError):
        record.name = "changed"  # type: ignore[misc]
