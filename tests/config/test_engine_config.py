from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from trackr.config import (
    ConfigurationError,
    LicensingConfig,
    ReconciliationConfig,
    get_licensing_config,
    get_reconciliation_config,
)

if TYPE_CHECKING:
    from collections.abc import Callable

ENGINE_VARS = (
    "TRACKR_ORPHAN_DAYS",
    "TRACKR_MATCH_WORKERS",
    "TRACKR_OPTIMIZATION_THRESHOLD",
    "TRACKR_EXPIRING_DAYS",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENGINE_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_environment() -> None:
    assert get_reconciliation_config() == ReconciliationConfig(orphan_days=30, match_workers=1)
    assert get_licensing_config() == LicensingConfig(
        optimization_threshold=0.70, expiring_days=30
    )


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TRACKR_ORPHAN_DAYS", "14")
    monkeypatch.setenv("TRACKR_MATCH_WORKERS", "4")
    monkeypatch.setenv("TRACKR_OPTIMIZATION_THRESHOLD", "0.5")
    monkeypatch.setenv("TRACKR_EXPIRING_DAYS", "60")

    assert get_reconciliation_config() == ReconciliationConfig(orphan_days=14, match_workers=4)
    assert get_licensing_config() == LicensingConfig(optimization_threshold=0.5, expiring_days=60)


@pytest.mark.parametrize(
    ("loader", "name", "raw"),
    [
        (get_reconciliation_config, "TRACKR_MATCH_WORKERS", "0"),
        (get_reconciliation_config, "TRACKR_ORPHAN_DAYS", "-1"),
        (get_licensing_config, "TRACKR_OPTIMIZATION_THRESHOLD", "1.2"),
        (get_licensing_config, "TRACKR_EXPIRING_DAYS", "soon"),
    ],
)
def test_invalid_values_are_rejected(
    monkeypatch: pytest.MonkeyPatch, loader: Callable[[], object], name: str, raw: str
) -> None:
    monkeypatch.setenv(name, raw)

    with pytest.raises(ConfigurationError, match=name):
        loader()
