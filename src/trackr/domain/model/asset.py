"""Canonical hardware asset aggregate."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from trackr.domain.model.entity import ArchivableEntity, Entity
from trackr.domain.model.enums import (
    AssetStatus,
    CustomFieldType,
    DepreciationType,
    EntityType,
)
from trackr.domain.similarity import normalize_identifier

if TYPE_CHECKING:
    from datetime import date, datetime

type CustomFieldValue = str | int | float | bool | None


@dataclass(frozen=True, slots=True)
class CustomField:
    value: CustomFieldValue
    type: CustomFieldType = CustomFieldType.TEXT


@dataclass(eq=False, kw_only=True)
class AssetAssignment(Entity):
    """One custody period of an asset; open until ``returned_date`` is set."""

    user_id: str
    assigned_by: str
    assigned_date: datetime
    returned_date: datetime | None = None
    returned_by: str | None = None
    notes: str | None = None

    @property
    def is_open(self) -> bool:
        return self.returned_date is None

    def close(self, *, returned_by: str, at: datetime, notes: str | None = None) -> None:
        self.returned_date = at
        self.returned_by = returned_by
        if notes:
            self.notes = notes


@dataclass(eq=False, kw_only=True)
class LocationChange(Entity):
    to_location_id: str
    moved_by: str
    moved_at: datetime
    from_location_id: str | None = None


@dataclass(eq=False, kw_only=True)
class CanonicalAsset(ArchivableEntity):
    """System-of-record hardware entity.

    Invariants kept by :mod:`trackr.domain.lifecycle.assets`:

    - archived implies status ``Retired``
    - ``assigned_to`` set implies status ``Active``
    - at most one open entry in ``assignment_history``
    """

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.ASSET

    name: str
    serial_number: str | None = None
    asset_tag: str | None = None
    manufacturer: str | None = None
    model: str | None = None
    category: str | None = None
    status: AssetStatus = AssetStatus.IN_STOCK

    assigned_to: str | None = None
    assigned_date: datetime | None = None
    location_id: str | None = None
    last_seen_in_discovery: datetime | None = None

    purchase_date: date | None = None
    purchase_price: float | None = None
    salvage_value: float = 0.0
    useful_life: int | None = None
    depreciation_type: DepreciationType = DepreciationType.STRAIGHT_LINE

    custom_fields: dict[str, CustomField] = field(default_factory=dict[str, CustomField])
    assignment_history: list[AssetAssignment] = field(
        default_factory=list[AssetAssignment], repr=False
    )
    location_history: list[LocationChange] = field(
        default_factory=list[LocationChange], repr=False
    )

    @property
    def normalized_serial(self) -> str | None:
        return normalize_identifier(self.serial_number)

    @property
    def is_assigned(self) -> bool:
        return self.assigned_to is not None

    @property
    def open_assignment(self) -> AssetAssignment | None:
        for entry in reversed(self.assignment_history):
            if entry.is_open:
                return entry
        return None
