"""SQLAlchemy ORM model for part ownership transfers."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from elevatorid.db.base import Base
from elevatorid.domain.mixins import IdMixin, TenantMixin, TimestampMixin

_PENDING_ONLY = text("status = 'pending'")


class PartTransfer(Base, IdMixin, TenantMixin, TimestampMixin):
    """A request to move a part between two companies.

    Lifecycle: pending -> approved | rejected. Terminal rows are never updated.
    """

    __tablename__ = "part_transfers"
    __table_args__ = (
        # At most one pending transfer per part.
        Index(
            "uq_part_transfers_one_pending",
            "part_id",
            unique=True,
            sqlite_where=_PENDING_ONLY,
            postgresql_where=_PENDING_ONLY,
        ),
    )

    part_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("parts.id"), nullable=False, index=True
    )
    initiator_company_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("companies.id"), nullable=False, index=True
    )
    seller_company_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("companies.id"), nullable=True, index=True
    )
    buyer_company_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("companies.id"), nullable=True, index=True
    )
    # "incoming" | "outgoing", relative to the initiator
    direction: Mapped[str] = mapped_column(String(20), default="outgoing", nullable=False)
    # Set when the counterparty is not a registered company
    other_company_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # "pending" | "approved" | "rejected"
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False, index=True)

    # "in_app" | "phone"
    approval_method: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    approved_by_user_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    approved_by_company_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    approved_by_ceo_phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    rejected_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    reject_reason: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    transfer_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def counterparty_company_id(self) -> Optional[str]:
        """The registered company on the other side of the initiator, if any."""
        if self.direction == "outgoing":
            return self.buyer_company_id
        return self.seller_company_id

    @property
    def is_external(self) -> bool:
        return self.counterparty_company_id is None
