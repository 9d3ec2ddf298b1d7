"""Turning reviewed matches into canonical field updates."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from trackr.domain.reconciliation.contracts import ConflictStrategy, MatchTier

if TYPE_CHECKING:
    from collections.abc import Iterable

    from trackr.domain.reconciliation.contracts import FieldConflict, ReconciliationMatch

log = logging.getLogger(__name__)


def resolve_conflict(conflict: FieldConflict, strategy: ConflictStrategy) -> str | None:
    """Value the canonical field should take; ``None`` leaves the decision to an operator."""

    match strategy:
        case ConflictStrategy.KEEP_EXISTING:
            return conflict.existing
        case ConflictStrategy.USE_DISCOVERED:
            return conflict.discovered
        case ConflictStrategy.MANUAL:
            return None


def planned_updates(
    match: ReconciliationMatch, strategy: ConflictStrategy
) -> dict[str, str | None]:
    """Field changes a strategy implies for the matched canonical asset.

    Only fields whose resolved value differs from the stored one are returned,
    so ``keep_existing`` and ``manual`` always plan nothing.
    """

    changes: dict[str, str | None] = {}
    for conflict in match.conflicts:
        resolved = resolve_conflict(conflict, strategy)
        if resolved is None or resolved == conflict.existing:
            continue
        changes[conflict.field] = resolved
    return changes


def pending_review(matches: Iterable[ReconciliationMatch]) -> list[ReconciliationMatch]:
    """Matches an operator still has to look at: conflicting or below ``high``."""

    pending = [
        match
        for match in matches
        if match.has_conflicts or match.tier not in {MatchTier.EXACT, MatchTier.HIGH}
    ]
    log.debug("%s match(es) pending review", len(pending))
    return pending
