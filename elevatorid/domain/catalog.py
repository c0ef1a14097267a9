"""SQLAlchemy ORM models for the part attribute schema (categories and features)."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from elevatorid.db.base import Base
from elevatorid.domain.mixins import IdMixin, TenantMixin, TimestampMixin


class Category(Base, IdMixin, TenantMixin, TimestampMixin):
    __tablename__ = "categories"
    __table_args__ = (UniqueConstraint("client_id", "slug", name="uq_categories_slug"),)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False)
    parent_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )


class Feature(Base, IdMixin, TenantMixin, TimestampMixin):
    """A technical spec key a part can carry, e.g. ``rated_load_kg``."""

    __tablename__ = "features"
    __table_args__ = (UniqueConstraint("client_id", "key", name="uq_features_key"),)

    key: Mapped[str] = mapped_column(String(100), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # "string" | "number" | "boolean"
    data_type: Mapped[str] = mapped_column(String(20), default="string", nullable=False)
    category_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True
    )
