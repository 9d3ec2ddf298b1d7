"""SQLAlchemy adapter package for trackr."""

from __future__ import annotations

from .mappings import (
    create_all_tables,
    mapper_registry,
    start_mappers,
)
from .repositories import (
    SqlAlchemyAssetRepository,
    SqlAlchemyAuditRepository,
    SqlAlchemyLicenseRepository,
)
from .unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyAssetRepository",
    "SqlAlchemyAuditRepository",
    "SqlAlchemyLicenseRepository",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "create_all_tables",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
