"""Domain port definitions for adapters."""

from __future__ import annotations

from .clock import Clock, system_clock
from .directory import AcceptAllDirectory, UserDirectory
from .persistence import (
    AssetRepository,
    AuditRepository,
    LicenseRepository,
    Repository,
)
from .unit_of_work import (
    InventoryRepositories,
    InventoryUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "AcceptAllDirectory",
    "AssetRepository",
    "AuditRepository",
    "Clock",
    "InventoryRepositories",
    "InventoryUnitOfWork",
    "LicenseRepository",
    "Repository",
    "RepositoryCollection",
    "UnitOfWork",
    "UserDirectory",
    "system_clock",
]
