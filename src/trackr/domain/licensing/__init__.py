"""License seat ledger and portfolio analytics."""

from __future__ import annotations

from .analytics import (
    DEFAULT_EXPIRING_DAYS,
    DEFAULT_OPTIMIZATION_THRESHOLD,
    ComplianceReport,
    DowngradeCandidate,
    PortfolioReport,
    TrueUpResult,
    UtilizationStats,
    compliance_report,
    expiring_licenses,
    optimization_candidates,
    portfolio_report,
    true_up,
    utilization_stats,
)
from .ledger import (
    allocate,
    archive_license,
    deallocate,
    resize,
    restore_license,
    set_lifecycle_override,
    update_license,
)

__all__ = [
    "DEFAULT_EXPIRING_DAYS",
    "DEFAULT_OPTIMIZATION_THRESHOLD",
    "ComplianceReport",
    "DowngradeCandidate",
    "PortfolioReport",
    "TrueUpResult",
    "UtilizationStats",
    "allocate",
    "archive_license",
    "compliance_report",
    "deallocate",
    "expiring_licenses",
    "optimization_candidates",
    "portfolio_report",
    "resize",
    "restore_license",
    "set_lifecycle_override",
    "true_up",
    "update_license",
    "utilization_stats",
]
