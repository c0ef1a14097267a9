"""SQLAlchemy ORM model for the company directory.

Companies are owned by the profile / onboarding side of the platform; the
ledger only needs identity, the trade id and the CEO contact phone used for
out-of-band transfer approval.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from elevatorid.db.base import Base
from elevatorid.domain.mixins import IdMixin, TenantMixin, TimestampMixin


class Company(Base, IdMixin, TenantMixin, TimestampMixin):
    __tablename__ = "companies"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    # "producer" | "importer" | "installer" | "seller"
    company_type: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    trade_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, index=True)
    ceo_phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
