"""Typed failures raised by domain operations.

Every operation checks its preconditions before mutating anything, so catching
one of these means the target entity is unchanged.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID


class TrackrError(Exception):
    """Base class for all domain failures."""


class ValidationError(TrackrError):
    """Malformed or missing required input."""


class NotFoundError(TrackrError):
    """Raised when an id does not resolve to a stored entity."""

    def __init__(self, message: str, *, entity_id: UUID | str | None = None) -> None:
        super().__init__(message)
        self.entity_id = entity_id


class ConflictError(TrackrError):
    """Archived-state violation, duplicate assignment or uniqueness violation."""


class CapacityError(TrackrError):
    """Raised when a license has no free seat left."""


class StateError(TrackrError):
    """Operation is not valid for the entity's current status."""
