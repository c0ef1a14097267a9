"""SQLAlchemy ORM model for the domain event audit trail."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import DateTime, JSON, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from elevatorid.db.base import Base
from elevatorid.domain.mixins import IdMixin, TenantMixin, utcnow


class AuditTrail(Base, IdMixin, TenantMixin):
    """One row per emitted domain event, written in the same transaction as the change."""

    __tablename__ = "audit_trail"

    # Who
    actor_company_id: Mapped[Optional[str]] = mapped_column(String(36), index=True, nullable=True)
    actor_user_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    # What, e.g. "TransferApproved" on ("part_transfer", <id>)
    action: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    entity_type: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    entity_id: Mapped[Optional[str]] = mapped_column(String(36), index=True, nullable=True)
    part_id: Mapped[Optional[str]] = mapped_column(String(36), index=True, nullable=True)

    payload: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # When (no updated_at, audit rows are immutable)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        index=True,
    )
