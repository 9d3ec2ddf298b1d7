"""
Base building blocks:
identity, optimistic version token and soft archival.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, ClassVar
from uuid import UUID, uuid4

if TYPE_CHECKING:
    from trackr.domain.model.enums import EntityType


def new_id() -> UUID:
    return uuid4()


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(eq=False, kw_only=True)
class Entity:
    """Internal identity exists immediately in the domain."""

    id: UUID = field(default_factory=new_id)

    # class-level discriminator; subclasses must override
    ENTITY_TYPE: ClassVar[EntityType]

    @property
    def entity_type(self) -> EntityType:
        return self.ENTITY_TYPE


@dataclass(eq=False, kw_only=True)
class VersionedEntity(Entity):
    """Entity whose every mutation bumps a monotonic version token."""

    version: int = 1
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def touch(self, at: datetime) -> None:
        self.version += 1
        self.updated_at = at


@dataclass(eq=False, kw_only=True)
class ArchivableEntity(VersionedEntity):
    """Soft archival is terminal until an explicit restore."""

    is_archived: bool = False
    archived_at: datetime | None = None
    archived_by: str | None = None
    archive_reason: str | None = None

    def mark_archived(self, *, actor: str, reason: str | None, at: datetime) -> None:
        self.is_archived = True
        self.archived_at = at
        self.archived_by = actor
        self.archive_reason = reason

    def clear_archival(self) -> None:
        self.is_archived = False
        self.archived_at = None
        self.archived_by = None
        self.archive_reason = None
