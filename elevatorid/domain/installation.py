"""SQLAlchemy ORM model for part installations (the ``elevator_part`` join)."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from elevatorid.db.base import Base
from elevatorid.domain.mixins import IdMixin, TenantMixin, TimestampMixin

_ACTIVE_ONLY = text("removed_at IS NULL")


class ElevatorPart(Base, IdMixin, TenantMixin, TimestampMixin):
    """One install/remove cycle of a part in an elevator.

    Removed rows stay as history; only rows with ``removed_at IS NULL`` are
    active, and a part has at most one active row.
    """

    __tablename__ = "elevator_part"
    __table_args__ = (
        Index(
            "uq_elevator_part_active_pair",
            "elevator_id",
            "part_id",
            unique=True,
            sqlite_where=_ACTIVE_ONLY,
            postgresql_where=_ACTIVE_ONLY,
        ),
        Index(
            "uq_elevator_part_active_part",
            "part_id",
            unique=True,
            sqlite_where=_ACTIVE_ONLY,
            postgresql_where=_ACTIVE_ONLY,
        ),
    )

    elevator_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("elevators.id"), nullable=False, index=True
    )
    part_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("parts.id"), nullable=False, index=True
    )
    installer_company_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("companies.id", ondelete="SET NULL"), nullable=True
    )
    installed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    removed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    removal_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    @property
    def is_active(self) -> bool:
        return self.removed_at is None
