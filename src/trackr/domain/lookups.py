"""Store lookups shared by single-item services and bulk operations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final
from uuid import UUID

from trackr.domain.errors import ConflictError, NotFoundError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from trackr.domain.model import CanonicalAsset, LicenseGrant
    from trackr.domain.ports import InventoryRepositories

ASSET_NOT_FOUND: Final[str] = "Asset not found"
LICENSE_NOT_FOUND: Final[str] = "License not found"


def as_uuid(value: UUID | str, *, not_found: str) -> UUID:
    """Parse an id; a malformed id cannot name a stored entity."""

    if isinstance(value, UUID):
        return value
    try:
        return UUID(value)
    except ValueError as exc:
        raise NotFoundError(not_found, entity_id=value) from exc


def require_asset(repositories: InventoryRepositories, asset_id: UUID | str) -> CanonicalAsset:
    asset = repositories.assets.get(as_uuid(asset_id, not_found=ASSET_NOT_FOUND))
    if asset is None:
        raise NotFoundError(ASSET_NOT_FOUND, entity_id=asset_id)
    return asset


def require_license(
    repositories: InventoryRepositories, license_id: UUID | str
) -> LicenseGrant:
    grant = repositories.licenses.get(as_uuid(license_id, not_found=LICENSE_NOT_FOUND))
    if grant is None:
        raise NotFoundError(LICENSE_NOT_FOUND, entity_id=license_id)
    return grant


def check_identifier_uniqueness(
    repositories: InventoryRepositories,
    changes: Mapping[str, object],
    *,
    asset: CanonicalAsset | None = None,
) -> None:
    """Reject a serial number or asset tag another stored asset already holds."""

    serial = changes.get("serial_number")
    if isinstance(serial, str) and serial.strip():
        holder = repositories.assets.find_by_serial(serial)
        if holder is not None and (asset is None or holder.id != asset.id):
            raise ConflictError("Serial number already exists")
    tag = changes.get("asset_tag")
    if isinstance(tag, str) and tag.strip():
        holder = repositories.assets.find_by_asset_tag(tag)
        if holder is not None and (asset is None or holder.id != asset.id):
            raise ConflictError("Asset tag already exists")
