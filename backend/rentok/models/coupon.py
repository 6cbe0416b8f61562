"""
RentOK Admin Backend — Coupon SQLAlchemy Models
================================================

What:  ORM models for the `coupons` and `coupon_usage` tables.
Who:   Used by CouponService for CRUD, redemption and validation.

Table Design:
    - code: stored upper-case; unique, so the validate endpoint can look a
      coupon up by the code a customer types
    - discount_type: 'percentage' | 'fixed'
    - applicable_to: 'all' | 'category' | 'product' | 'vendor'; when not 'all',
      applicable_ids lists the category/product/vendor IDs it applies to
    - used_count vs usage_limit: redemption is refused once they meet
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import Boolean, ForeignKey, Index, Integer, Numeric, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import ARRAY, UUID, TIMESTAMP

from rentok.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Coupon(Base):
    """A discount code that customers apply at checkout."""

    __tablename__ = "coupons"

    coupon_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )
    code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    discount_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="percentage or fixed",
    )
    discount_value: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    minimum_amount: Mapped[Optional[float]] = mapped_column(
        Numeric(10, 2, asdecimal=False), nullable=True
    )
    maximum_discount: Mapped[Optional[float]] = mapped_column(
        Numeric(10, 2, asdecimal=False), nullable=True
    )

    usage_limit: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    used_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )

    valid_from: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    valid_until: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("true")
    )

    applicable_to: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="all",
        server_default=text("'all'"),
        comment="all, category, product or vendor",
    )
    applicable_ids: Mapped[Optional[List[str]]] = mapped_column(ARRAY(String), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    # Admin listing is newest first
    __table_args__ = (
        Index("idx_coupons_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Coupon(code='{self.code}', active={self.is_active}, used={self.used_count})>"


class CouponUsage(Base):
    """One redemption of a coupon against an order."""

    __tablename__ = "coupon_usage"

    usage_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )
    coupon_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("coupons.coupon_id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    order_id: Mapped[str] = mapped_column(String(64), nullable=False)
    used_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
