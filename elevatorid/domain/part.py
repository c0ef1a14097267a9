"""SQLAlchemy ORM models for parts, their spec values and the ownership log.

``Part.current_owner_*`` is a projection of ``PartOwnershipEvent``: the two
are written together by ``PartRegistry.set_owner`` and nowhere else.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from elevatorid.db.base import Base
from elevatorid.domain.mixins import IdMixin, TenantMixin, TimestampMixin, utcnow


class Part(Base, IdMixin, TenantMixin, TimestampMixin):
    __tablename__ = "parts"
    __table_args__ = (
        CheckConstraint(
            "(current_owner_type = 'company'"
            " AND current_owner_company_id IS NOT NULL"
            " AND current_owner_elevator_id IS NULL)"
            " OR (current_owner_type = 'elevator'"
            " AND current_owner_elevator_id IS NOT NULL"
            " AND current_owner_company_id IS NULL)",
            name="ck_parts_single_owner",
        ),
    )

    part_uid: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    category_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True
    )
    barcode: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    manufacturer_country: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    origin_country: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    registrant_company_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("companies.id"), nullable=False, index=True
    )

    # "company" | "elevator"
    current_owner_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    current_owner_company_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("companies.id"), nullable=True, index=True
    )
    current_owner_elevator_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("elevators.id"), nullable=True, index=True
    )

    feature_values: Mapped[List["PartFeatureValue"]] = relationship(
        back_populates="part", lazy="selectin", cascade="all, delete-orphan"
    )


class PartFeatureValue(Base, IdMixin, TenantMixin, TimestampMixin):
    __tablename__ = "part_feature_values"
    __table_args__ = (
        UniqueConstraint("part_id", "feature_id", name="uq_part_feature_values_part_feature"),
    )

    part_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("parts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    feature_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("features.id", ondelete="CASCADE"), nullable=False
    )
    value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    part: Mapped["Part"] = relationship(back_populates="feature_values")


class PartOwnershipEvent(Base, IdMixin, TenantMixin):
    """Append-only record of every owner change (never updated or deleted)."""

    __tablename__ = "part_ownership_events"
    __table_args__ = (
        UniqueConstraint("part_id", "sequence", name="uq_part_ownership_events_sequence"),
    )

    part_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("parts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    # "registered" | "transfer_approved" | "installed" | "returned_to_stock"
    cause: Mapped[str] = mapped_column(String(30), nullable=False)

    owner_type: Mapped[str] = mapped_column(String(20), nullable=False)
    owner_company_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    owner_elevator_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    transfer_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("part_transfers.id"), nullable=True
    )
    elevator_part_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("elevator_part.id"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        index=True,
    )
