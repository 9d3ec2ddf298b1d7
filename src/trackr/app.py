"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from trackr.adapters.discovery import translate_batch
from trackr.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from trackr.config import get_licensing_config, get_reconciliation_config
from trackr.domain.bulk import BulkOperationCoordinator
from trackr.domain.licensing import portfolio_report
from trackr.domain.ports.clock import system_clock
from trackr.domain.reconciliation import ReconciliationEngine
from trackr.domain.services import InventoryService

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from datetime import datetime

    from trackr.config import LicensingConfig, ReconciliationConfig
    from trackr.domain.licensing import PortfolioReport
    from trackr.domain.model import DiscoverySourceType
    from trackr.domain.ports import Clock, InventoryUnitOfWork, UserDirectory
    from trackr.domain.reconciliation import ReconciliationResult

type UnitOfWorkFactory = Callable[[], InventoryUnitOfWork]


log = getLogger(__name__)


def _default_unit_of_work_factory() -> UnitOfWorkFactory:
    if not is_started():
        startup()
    return SqlAlchemyUnitOfWork


def reconcile_discovery(
    payloads: Iterable[Mapping[str, object]],
    *,
    source_type: DiscoverySourceType | str,
    source_id: str,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: ReconciliationConfig | None = None,
    acknowledge: bool = False,
    now: datetime | None = None,
) -> ReconciliationResult:
    """Reconcile one discovery sync against the stored canonical inventory.

    With ``acknowledge=True`` every matched asset gets its
    ``last_seen_in_discovery`` stamped from the discovered record.
    """

    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    effective_config = config or get_reconciliation_config()
    records = translate_batch(source_type, source_id, payloads, now=now)
    log.info(
        "Starting reconciliation: source=%s/%s, records=%s, orphan_days=%s, workers=%s",
        source_type,
        source_id,
        len(records),
        effective_config.orphan_days,
        effective_config.match_workers,
    )

    with effective_uow() as uow:
        snapshot = list(uow.repositories.assets.list(include_archived=True))

    engine = ReconciliationEngine(max_workers=effective_config.match_workers)
    result = engine.reconcile(records, snapshot, effective_config.orphan_days, now=now)

    if acknowledge and result.matches:
        service = InventoryService(unit_of_work_factory=effective_uow)
        service.acknowledge_matches(result.matches)

    log.info(
        "Finished reconciliation: matched=%s, unmatched=%s, orphaned=%s, duplicate_groups=%s",
        result.stats.total,
        len(result.unmatched),
        len(result.orphaned),
        len(result.duplicate_serial_groups),
    )
    return result


def license_portfolio_report(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: LicensingConfig | None = None,
    now: datetime | None = None,
) -> PortfolioReport:
    """Evaluate compliance, utilization, optimization, expiry and true-ups for stored licenses."""

    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    effective_config = config or get_licensing_config()
    with effective_uow() as uow:
        licenses = list(uow.repositories.licenses.list(include_archived=True))

    report = portfolio_report(
        licenses,
        optimization_threshold=effective_config.optimization_threshold,
        expiring_days=effective_config.expiring_days,
        now=now,
    )
    log.info(
        "License portfolio: licenses=%s, score=%s, optimization=%s, expiring=%s, true_ups=%s",
        report.compliance.total,
        report.compliance.score,
        len(report.optimization),
        len(report.expiring),
        len(report.true_ups),
    )
    return report


def build_inventory_service(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    directory: UserDirectory | None = None,
    clock: Clock = system_clock,
) -> InventoryService:
    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    if directory is None:
        return InventoryService(unit_of_work_factory=effective_uow, clock=clock)
    return InventoryService(unit_of_work_factory=effective_uow, directory=directory, clock=clock)


def build_bulk_coordinator(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    max_workers: int = 1,
    clock: Clock = system_clock,
    actor: str = "bulk",
) -> BulkOperationCoordinator:
    return BulkOperationCoordinator(
        unit_of_work_factory=unit_of_work_factory or _default_unit_of_work_factory(),
        max_workers=max_workers,
        clock=clock,
        actor=actor,
    )
