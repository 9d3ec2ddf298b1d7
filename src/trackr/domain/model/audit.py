"""Append-only audit records for lifecycle and seat-ledger mutations."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from trackr.domain.model.entity import new_id, utc_now

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from trackr.domain.model.enums import AuditAction, EntityType

type AuditDetailValue = str | int | float | bool | None


@dataclass(eq=False, kw_only=True)
class AuditTrailEntry:
    """Who did what to which entity, and when.

    Entries are plain records, not entities: ``entity_type`` names the audited
    aggregate.
    """

    id: UUID = field(default_factory=new_id)
    entity_type: EntityType
    entity_id: UUID
    action: AuditAction
    actor: str
    reason: str | None = None
    timestamp: datetime = field(default_factory=utc_now)
    details: dict[str, AuditDetailValue] = field(default_factory=dict[str, AuditDetailValue])


type AuditSink = Callable[[AuditTrailEntry], None]


def discard_audit(entry: AuditTrailEntry) -> None:
    _ = entry
