"""Reconciliation and licensing defaults, overridable from the environment."""

from __future__ import annotations

from dataclasses import dataclass

from trackr.domain.licensing import DEFAULT_EXPIRING_DAYS, DEFAULT_OPTIMIZATION_THRESHOLD
from trackr.domain.reconciliation.engine import DEFAULT_ORPHAN_DAYS

from .env import env_float, env_int

DEFAULT_MATCH_WORKERS = 1


@dataclass(frozen=True, slots=True)
class ReconciliationConfig:
    orphan_days: int = DEFAULT_ORPHAN_DAYS
    match_workers: int = DEFAULT_MATCH_WORKERS


@dataclass(frozen=True, slots=True)
class LicensingConfig:
    optimization_threshold: float = DEFAULT_OPTIMIZATION_THRESHOLD
    expiring_days: int = DEFAULT_EXPIRING_DAYS


def get_reconciliation_config() -> ReconciliationConfig:
    return ReconciliationConfig(
        orphan_days=env_int("TRACKR_ORPHAN_DAYS", DEFAULT_ORPHAN_DAYS, minimum=0),
        match_workers=env_int("TRACKR_MATCH_WORKERS", DEFAULT_MATCH_WORKERS, minimum=1),
    )


def get_licensing_config() -> LicensingConfig:
    return LicensingConfig(
        optimization_threshold=env_float(
            "TRACKR_OPTIMIZATION_THRESHOLD",
            DEFAULT_OPTIMIZATION_THRESHOLD,
            minimum=0.0,
            maximum=1.0,
        ),
        expiring_days=env_int("TRACKR_EXPIRING_DAYS", DEFAULT_EXPIRING_DAYS, minimum=0),
    )
