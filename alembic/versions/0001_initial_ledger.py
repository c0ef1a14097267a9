"""initial ledger schema

Revision ID: 0001_initial_ledger
Revises:
Create Date: 2026-10-19 09:00:00
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "0001_initial_ledger"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", sa.String(36), primary_key=True)


def _tenant() -> sa.Column:
    return sa.Column("client_id", sa.String(100), nullable=False, index=True)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "companies",
        _id(),
        _tenant(),
        sa.Column("name", sa.String(255), nullable=False, index=True),
        sa.Column("company_type", sa.String(30), nullable=True),
        sa.Column("trade_id", sa.String(50), nullable=True, index=True),
        sa.Column("ceo_phone", sa.String(30), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "elevators",
        _id(),
        _tenant(),
        sa.Column("elevator_uid", sa.String(50), nullable=False, unique=True, index=True),
        sa.Column("province", sa.String(100), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("address", sa.String(255), nullable=True),
        sa.Column("postal_code", sa.String(20), nullable=True),
        sa.Column(
            "installer_company_id",
            sa.String(36),
            sa.ForeignKey("companies.id", ondelete="SET NULL"),
            nullable=True,
            index=True,
        ),
        sa.Column("status", sa.String(30), nullable=False, server_default="active"),
        sa.Column("last_inspection_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "categories",
        _id(),
        _tenant(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("parent_id", sa.String(36), sa.ForeignKey("categories.id", ondelete="SET NULL"), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("client_id", "slug", name="uq_categories_slug"),
    )

    op.create_table(
        "features",
        _id(),
        _tenant(),
        sa.Column("key", sa.String(100), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("data_type", sa.String(20), nullable=False, server_default="string"),
        sa.Column(
            "category_id",
            sa.String(36),
            sa.ForeignKey("categories.id", ondelete="SET NULL"),
            nullable=True,
            index=True,
        ),
        *_timestamps(),
        sa.UniqueConstraint("client_id", "key", name="uq_features_key"),
    )

    op.create_table(
        "parts",
        _id(),
        _tenant(),
        sa.Column("part_uid", sa.String(64), nullable=False, unique=True, index=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column(
            "category_id",
            sa.String(36),
            sa.ForeignKey("categories.id", ondelete="SET NULL"),
            nullable=True,
            index=True,
        ),
        sa.Column("barcode", sa.String(255), nullable=True, index=True),
        sa.Column("manufacturer_country", sa.String(100), nullable=True),
        sa.Column("origin_country", sa.String(100), nullable=True),
        sa.Column("registrant_company_id", sa.String(36), sa.ForeignKey("companies.id"), nullable=False, index=True),
        sa.Column("current_owner_type", sa.String(20), nullable=False, index=True),
        sa.Column("current_owner_company_id", sa.String(36), sa.ForeignKey("companies.id"), nullable=True, index=True),
        sa.Column("current_owner_elevator_id", sa.String(36), sa.ForeignKey("elevators.id"), nullable=True, index=True),
        *_timestamps(),
        sa.CheckConstraint(
            "(current_owner_type = 'company'"
            " AND current_owner_company_id IS NOT NULL"
            " AND current_owner_elevator_id IS NULL)"
            " OR (current_owner_type = 'elevator'"
            " AND current_owner_elevator_id IS NOT NULL"
            " AND current_owner_company_id IS NULL)",
            name="ck_parts_single_owner",
        ),
    )

    op.create_table(
        "part_feature_values",
        _id(),
        _tenant(),
        sa.Column("part_id", sa.String(36), sa.ForeignKey("parts.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("feature_id", sa.String(36), sa.ForeignKey("features.id", ondelete="CASCADE"), nullable=False),
        sa.Column("value", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("part_id", "feature_id", name="uq_part_feature_values_part_feature"),
    )

    op.create_table(
        "part_transfers",
        _id(),
        _tenant(),
        sa.Column("part_id", sa.String(36), sa.ForeignKey("parts.id"), nullable=False, index=True),
        sa.Column("initiator_company_id", sa.String(36), sa.ForeignKey("companies.id"), nullable=False, index=True),
        sa.Column("seller_company_id", sa.String(36), sa.ForeignKey("companies.id"), nullable=True, index=True),
        sa.Column("buyer_company_id", sa.String(36), sa.ForeignKey("companies.id"), nullable=True, index=True),
        sa.Column("direction", sa.String(20), nullable=False, server_default="outgoing"),
        sa.Column("other_company_name", sa.String(255), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending", index=True),
        sa.Column("approval_method", sa.String(20), nullable=True),
        sa.Column("approved_by_user_id", sa.String(36), nullable=True),
        sa.Column("approved_by_company_id", sa.String(36), nullable=True),
        sa.Column("approved_by_ceo_phone", sa.String(30), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rejected_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reject_reason", sa.String(500), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("transfer_date", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index(
        "uq_part_transfers_one_pending",
        "part_transfers",
        ["part_id"],
        unique=True,
        sqlite_where=sa.text("status = 'pending'"),
        postgresql_where=sa.text("status = 'pending'"),
    )

    op.create_table(
        "elevator_part",
        _id(),
        _tenant(),
        sa.Column("elevator_id", sa.String(36), sa.ForeignKey("elevators.id"), nullable=False, index=True),
        sa.Column("part_id", sa.String(36), sa.ForeignKey("parts.id"), nullable=False, index=True),
        sa.Column(
            "installer_company_id",
            sa.String(36),
            sa.ForeignKey("companies.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("installed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("removed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("removal_reason", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index(
        "uq_elevator_part_active_pair",
        "elevator_part",
        ["elevator_id", "part_id"],
        unique=True,
        sqlite_where=sa.text("removed_at IS NULL"),
        postgresql_where=sa.text("removed_at IS NULL"),
    )
    op.create_index(
        "uq_elevator_part_active_part",
        "elevator_part",
        ["part_id"],
        unique=True,
        sqlite_where=sa.text("removed_at IS NULL"),
        postgresql_where=sa.text("removed_at IS NULL"),
    )

    op.create_table(
        "part_ownership_events",
        _id(),
        _tenant(),
        sa.Column("part_id", sa.String(36), sa.ForeignKey("parts.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("cause", sa.String(30), nullable=False),
        sa.Column("owner_type", sa.String(20), nullable=False),
        sa.Column("owner_company_id", sa.String(36), nullable=True),
        sa.Column("owner_elevator_id", sa.String(36), nullable=True),
        sa.Column("transfer_id", sa.String(36), sa.ForeignKey("part_transfers.id"), nullable=True),
        sa.Column("elevator_part_id", sa.String(36), sa.ForeignKey("elevator_part.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False, index=True),
        sa.UniqueConstraint("part_id", "sequence", name="uq_part_ownership_events_sequence"),
    )

    op.create_table(
        "audit_trail",
        _id(),
        _tenant(),
        sa.Column("actor_company_id", sa.String(36), nullable=True, index=True),
        sa.Column("actor_user_id", sa.String(36), nullable=True),
        sa.Column("action", sa.String(100), nullable=False, index=True),
        sa.Column("entity_type", sa.String(100), nullable=False, index=True),
        sa.Column("entity_id", sa.String(36), nullable=True, index=True),
        sa.Column("part_id", sa.String(36), nullable=True, index=True),
        sa.Column("payload", sa.JSON(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False, index=True),
    )


def downgrade() -> None:
    op.drop_table("audit_trail")
    op.drop_table("part_ownership_events")
    op.drop_index("uq_elevator_part_active_part", table_name="elevator_part")
    op.drop_index("uq_elevator_part_active_pair", table_name="elevator_part")
    op.drop_table("elevator_part")
    op.drop_index("uq_part_transfers_one_pending", table_name="part_transfers")
    op.drop_table("part_transfers")
    op.drop_table("part_feature_values")
    op.drop_table("parts")
    op.drop_table("features")
    op.drop_table("categories")
    op.drop_table("elevators")
    op.drop_table("companies")
