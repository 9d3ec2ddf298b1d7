"""Asset lifecycle state machine and depreciation."""

from __future__ import annotations

from .assets import (
    STATUS_TRANSITIONS,
    UPDATABLE_FIELDS,
    archive,
    assign,
    change_status,
    mark_seen_in_discovery,
    remove_custom_field,
    restore,
    return_asset,
    set_custom_field,
    transfer,
    update_asset,
)
from .depreciation import DepreciationResult, age_in_years, calculate_depreciation

__all__ = [
    "STATUS_TRANSITIONS",
    "UPDATABLE_FIELDS",
    "DepreciationResult",
    "age_in_years",
    "archive",
    "assign",
    "calculate_depreciation",
    "change_status",
    "mark_seen_in_discovery",
    "remove_custom_field",
    "restore",
    "return_asset",
    "set_custom_field",
    "transfer",
    "update_asset",
]
