"""SQLAlchemy ORM model for registered elevators."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from elevatorid.db.base import Base
from elevatorid.domain.mixins import IdMixin, TenantMixin, TimestampMixin


class Elevator(Base, IdMixin, TenantMixin, TimestampMixin):
    __tablename__ = "elevators"

    elevator_uid: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    province: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    postal_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    installer_company_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("companies.id", ondelete="SET NULL"), nullable=True, index=True
    )
    # "active" | "maintenance" | "out_of_order" | "suspended"
    status: Mapped[str] = mapped_column(String(30), default="active", nullable=False)
    last_inspection_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
