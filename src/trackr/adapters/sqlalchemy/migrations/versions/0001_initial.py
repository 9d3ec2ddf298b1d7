"""Initial inventory schema: assets, licenses and the audit trail.

Revision ID: 0001_initial
Revises:
Create Date: 2025-02-03 09:12:00
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "asset",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("serial_number", sa.String(), nullable=True),
        sa.Column("asset_tag", sa.String(), nullable=True),
        sa.Column("manufacturer", sa.String(), nullable=True),
        sa.Column("model", sa.String(), nullable=True),
        sa.Column("category", sa.String(), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("assigned_to", sa.String(), nullable=True),
        sa.Column("assigned_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("location_id", sa.String(), nullable=True),
        sa.Column("last_seen_in_discovery", sa.DateTime(timezone=True), nullable=True),
        sa.Column("purchase_date", sa.Date(), nullable=True),
        sa.Column("purchase_price", sa.Float(), nullable=True),
        sa.Column("salvage_value", sa.Float(), nullable=False),
        sa.Column("useful_life", sa.Integer(), nullable=True),
        sa.Column("depreciation_type", sa.String(length=32), nullable=False),
        sa.Column("custom_fields", sa.JSON(), nullable=False),
        sa.Column("is_archived", sa.Boolean(), nullable=False),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("archived_by", sa.String(), nullable=True),
        sa.Column("archive_reason", sa.String(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_asset")),
        sa.UniqueConstraint("asset_tag", name=op.f("uq_asset_asset_tag")),
    )
    op.create_index(
        "uq_asset_serial_number_lower",
        "asset",
        [sa.text("lower(serial_number)")],
        unique=True,
    )

    op.create_table(
        "asset_assignment",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("asset_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("assigned_by", sa.String(), nullable=False),
        sa.Column("assigned_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("returned_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("returned_by", sa.String(), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(
            ["asset_id"],
            ["asset.id"],
            name=op.f("fk_asset_assignment_asset_id_asset"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_asset_assignment")),
    )
    op.create_index(
        op.f("ix_asset_assignment_asset_id"), "asset_assignment", ["asset_id"], unique=False
    )

    op.create_table(
        "asset_location_change",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("asset_id", sa.Uuid(), nullable=False),
        sa.Column("from_location_id", sa.String(), nullable=True),
        sa.Column("to_location_id", sa.String(), nullable=False),
        sa.Column("moved_by", sa.String(), nullable=False),
        sa.Column("moved_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["asset_id"],
            ["asset.id"],
            name=op.f("fk_asset_location_change_asset_id_asset"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_asset_location_change")),
    )
    op.create_index(
        op.f("ix_asset_location_change_asset_id"),
        "asset_location_change",
        ["asset_id"],
        unique=False,
    )

    op.create_table(
        "license_grant",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("vendor", sa.String(), nullable=True),
        sa.Column("license_type", sa.String(length=32), nullable=False),
        sa.Column("category", sa.String(), nullable=True),
        sa.Column("total_seats", sa.Integer(), nullable=False),
        sa.Column("assigned_to", sa.String(), nullable=False),
        sa.Column("purchase_cost", sa.Float(), nullable=False),
        sa.Column("annual_cost", sa.Float(), nullable=True),
        sa.Column("purchase_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("expiration_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("renewal_notification_days", sa.Integer(), nullable=False),
        sa.Column("lifecycle_override", sa.String(length=32), nullable=True),
        sa.Column("is_archived", sa.Boolean(), nullable=False),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("archived_by", sa.String(), nullable=True),
        sa.Column("archive_reason", sa.String(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_license_grant")),
    )

    op.create_table(
        "license_assignment",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("license_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("assigned_by", sa.String(), nullable=False),
        sa.Column("assigned_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("unassigned_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("unassigned_by", sa.String(), nullable=True),
        sa.Column("reason", sa.String(), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(
            ["license_id"],
            ["license_grant.id"],
            name=op.f("fk_license_assignment_license_id_license_grant"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_license_assignment")),
    )
    op.create_index(
        op.f("ix_license_assignment_license_id"),
        "license_assignment",
        ["license_id"],
        unique=False,
    )

    op.create_table(
        "audit_entry",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("entity_type", sa.String(length=32), nullable=False),
        sa.Column("entity_id", sa.Uuid(), nullable=False),
        sa.Column("action", sa.String(length=32), nullable=False),
        sa.Column("actor", sa.String(), nullable=False),
        sa.Column("reason", sa.String(), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_audit_entry")),
    )
    op.create_index(
        "ix_audit_entry_entity", "audit_entry", ["entity_type", "entity_id"], unique=False
    )


def downgrade() -> None:
    op.drop_index("ix_audit_entry_entity", table_name="audit_entry")
    op.drop_table("audit_entry")
    op.drop_index(op.f("ix_license_assignment_license_id"), table_name="license_assignment")
    op.drop_table("license_assignment")
    op.drop_table("license_grant")
    op.drop_index(
        op.f("ix_asset_location_change_asset_id"), table_name="asset_location_change"
    )
    op.drop_table("asset_location_change")
    op.drop_index(op.f("ix_asset_assignment_asset_id"), table_name="asset_assignment")
    op.drop_table("asset_assignment")
    op.drop_index("uq_asset_serial_number_lower", table_name="asset")
    op.drop_table("asset")
