"""Externally observed device facts pending reconciliation.

Discovered records are ephemeral: produced per sync, never persisted. Source
specific detail is carried by a closed set of metadata variants plus a small,
scalar-only passthrough mapping.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, ClassVar, Final

from trackr.domain.errors import ValidationError
from trackr.domain.model.enums import DiscoverySourceType
from trackr.domain.similarity import normalize_identifier

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

MAX_PASSTHROUGH_KEYS: Final[int] = 32

type PassthroughValue = str | int | float | bool | None


@dataclass(frozen=True, slots=True, kw_only=True)
class MdmMetadata:
    SOURCE_TYPE: ClassVar[DiscoverySourceType] = DiscoverySourceType.MDM

    os_version: str | None = None
    enrolled_user: str | None = None
    compliance_state: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class IntuneMetadata:
    SOURCE_TYPE: ClassVar[DiscoverySourceType] = DiscoverySourceType.INTUNE

    azure_device_id: str | None = None
    os_version: str | None = None
    user_principal_name: str | None = None
    compliance_state: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class JamfMetadata:
    SOURCE_TYPE: ClassVar[DiscoverySourceType] = DiscoverySourceType.JAMF

    udid: str | None = None
    os_version: str | None = None
    department: str | None = None
    username: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class CsvMetadata:
    SOURCE_TYPE: ClassVar[DiscoverySourceType] = DiscoverySourceType.CSV

    file_name: str | None = None
    row_number: int | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ManualMetadata:
    SOURCE_TYPE: ClassVar[DiscoverySourceType] = DiscoverySourceType.MANUAL

    entered_by: str | None = None


type DiscoveryMetadata = MdmMetadata | IntuneMetadata | JamfMetadata | CsvMetadata | ManualMetadata


@dataclass(frozen=True, slots=True, kw_only=True)
class DiscoveredRecord:
    source_id: str
    external_id: str
    name: str
    last_seen: datetime
    serial_number: str | None = None
    manufacturer: str | None = None
    model: str | None = None
    metadata: DiscoveryMetadata = field(default_factory=ManualMetadata)
    passthrough: Mapping[str, PassthroughValue] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self) -> None:
        if len(self.passthrough) > MAX_PASSTHROUGH_KEYS:
            raise ValidationError(
                f"Discovery passthrough exceeds {MAX_PASSTHROUGH_KEYS} keys "
                f"({len(self.passthrough)})"
            )
        for key, value in self.passthrough.items():
            if value is not None and not isinstance(value, str | int | float | bool):
                raise ValidationError(f"Discovery passthrough value for {key!r} is not a scalar")
        object.__setattr__(self, "passthrough", MappingProxyType(dict(self.passthrough)))

    @property
    def source_type(self) -> DiscoverySourceType:
        return self.metadata.SOURCE_TYPE

    @property
    def normalized_serial(self) -> str | None:
        return normalize_identifier(self.serial_number)
