"""Tests for SQLAlchemy repositories."""

from __future__ import annotations

from datetime import date, timedelta

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session  # noqa: TC002

from tests.helpers.inventory import FIXED_NOW, make_asset, make_license
from trackr.adapters.sqlalchemy.repositories import (
    SqlAlchemyAssetRepository,
    SqlAlchemyAuditRepository,
    SqlAlchemyLicenseRepository,
)
from trackr.domain import licensing, lifecycle
from trackr.domain.model import (
    AssetStatus,
    AuditAction,
    AuditTrailEntry,
    CustomFieldType,
    DepreciationType,
    EntityType,
    LicenseStatus,
)


def test_asset_round_trip_keeps_history_and_custom_fields(sqlite_session: Session) -> None:
    repository = SqlAlchemyAssetRepository(sqlite_session)
    asset = make_asset(
        purchase_date=date(2024, 1, 15),
        purchase_price=1500.0,
        useful_life=4,
        depreciation_type=DepreciationType.SUM_OF_YEARS,
    )
    lifecycle.assign(asset, "alice", assigned_by="admin", now=FIXED_NOW)
    lifecycle.transfer(asset, "berlin-hq", moved_by="admin", now=FIXED_NOW)
    lifecycle.set_custom_field(
        asset, "cost_center", 4711, field_type=CustomFieldType.NUMBER, now=FIXED_NOW
    )
    repository.add(asset)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    loaded = repository.get(asset.id)

    assert loaded is not None
    assert loaded is not asset
    assert loaded.status is AssetStatus.ACTIVE
    assert loaded.assigned_to == "alice"
    assert loaded.purchase_date == date(2024, 1, 15)
    assert loaded.depreciation_type is DepreciationType.SUM_OF_YEARS
    assert loaded.custom_fields["cost_center"].value == 4711
    assert loaded.custom_fields["cost_center"].type is CustomFieldType.NUMBER
    assert [entry.user_id for entry in loaded.assignment_history] == ["alice"]
    assert [change.to_location_id for change in loaded.location_history] == ["berlin-hq"]
    assert loaded.updated_at == FIXED_NOW
    assert loaded.version == asset.version


def test_find_by_serial_ignores_case_and_whitespace(sqlite_session: Session) -> None:
    repository = SqlAlchemyAssetRepository(sqlite_session)
    asset = make_asset(serial_number="C02ABC", asset_tag="IT-0042")
    repository.add(asset)
    sqlite_session.commit()

    assert repository.find_by_serial("  c02abc ") is asset
    assert repository.find_by_serial("   ") is None
    assert repository.find_by_asset_tag(" IT-0042 ") is asset
    assert repository.find_by_asset_tag("it-0042") is None


def test_serial_numbers_are_unique_regardless_of_case(sqlite_session: Session) -> None:
    repository = SqlAlchemyAssetRepository(sqlite_session)
    repository.add(make_asset(serial_number="SN-1"))
    repository.add(make_asset(serial_number="sn-1"))

    with pytest.raises(IntegrityError):
        sqlite_session.commit()


def test_assets_without_serial_do_not_collide(sqlite_session: Session) -> None:
    repository = SqlAlchemyAssetRepository(sqlite_session)
    repository.add(make_asset("Monitor A", serial_number=None))
    repository.add(make_asset("Monitor B", serial_number=None))
    sqlite_session.commit()

    assert repository.count() == 2


def test_asset_listing_filters_archived(sqlite_session: Session) -> None:
    repository = SqlAlchemyAssetRepository(sqlite_session)
    kept = make_asset(serial_number="SN-1")
    gone = make_asset(serial_number="SN-2", created_at=FIXED_NOW + timedelta(minutes=1))
    lifecycle.archive(gone, actor="admin", now=FIXED_NOW)
    repository.add(kept)
    repository.add(gone)
    sqlite_session.commit()

    assert repository.list() == [kept, gone]
    assert repository.list(include_archived=False) == [kept]
    assert repository.count(include_archived=False) == 1


def test_license_round_trip_keeps_seat_ledger(sqlite_session: Session) -> None:
    repository = SqlAlchemyLicenseRepository(sqlite_session)
    grant = make_license(total_seats=3, expiration_date=FIXED_NOW + timedelta(days=90))
    licensing.allocate(grant, "alice", allocated_by="admin", now=FIXED_NOW)
    licensing.allocate(grant, "bob", allocated_by="admin", now=FIXED_NOW)
    licensing.deallocate(grant, "alice", actor="admin", now=FIXED_NOW + timedelta(hours=1))
    licensing.set_lifecycle_override(grant, LicenseStatus.SUSPENDED, now=FIXED_NOW)
    repository.add(grant)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    loaded = repository.get(grant.id)

    assert loaded is not None
    assert loaded.assigned_to == frozenset({"bob"})
    assert loaded.used_seats == 1
    assert loaded.expiration_date == FIXED_NOW + timedelta(days=90)
    assert loaded.lifecycle_override is LicenseStatus.SUSPENDED
    assert [(seat.user_id, seat.is_open) for seat in loaded.assignment_history] == [
        ("alice", False),
        ("bob", True),
    ]


def test_license_listing_filters_archived(sqlite_session: Session) -> None:
    repository = SqlAlchemyLicenseRepository(sqlite_session)
    active = make_license("Active")
    archived = make_license("Archived", created_at=FIXED_NOW + timedelta(minutes=1))
    licensing.archive_license(archived, actor="admin", now=FIXED_NOW)
    repository.add(active)
    repository.add(archived)
    sqlite_session.commit()

    assert repository.list() == [active, archived]
    assert repository.list(include_archived=False) == [active]


def test_audit_entries_are_scoped_to_one_entity(sqlite_session: Session) -> None:
    repository = SqlAlchemyAuditRepository(sqlite_session)
    asset = make_asset()
    other = make_asset(serial_number="SN-9")
    lifecycle.assign(asset, "alice", assigned_by="admin", audit=repository.add, now=FIXED_NOW)
    lifecycle.return_asset(
        asset, returned_by="admin", audit=repository.add, now=FIXED_NOW + timedelta(hours=1)
    )
    lifecycle.archive(other, actor="admin", audit=repository.add, now=FIXED_NOW)
    sqlite_session.commit()

    trail = repository.for_entity(EntityType.ASSET, asset.id)

    assert [entry.action for entry in trail] == [AuditAction.ASSIGN, AuditAction.RETURN]
    assert all(isinstance(entry, AuditTrailEntry) for entry in trail)
    assert trail[0].details["user_id"] == "alice"
    assert repository.for_entity(EntityType.LICENSE, asset.id) == []
