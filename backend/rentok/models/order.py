"""
RentOK Admin Backend — Order SQLAlchemy Models
===============================================

What:  ORM models for `orders`, `order_items` and `order_status_history`.
Who:   Used by OrderService.

Relationships are declared lazy="raise": async sessions cannot lazy-load,
so every query that needs a relationship must ask for it with
selectinload(). See OrderService.ORDER_DETAIL_OPTIONS.
"""

import uuid
from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy import Date, ForeignKey, Index, Integer, Numeric, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID, TIMESTAMP

from rentok.database import Base
from rentok.models.catalog import Product, Profile


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Order(Base):
    """
    A rental order placed by a customer.

    Status lifecycle (free-form string, lower-case by convention):
        pending → confirmed → processing → shipped → delivered
        pending | confirmed → cancelled | rejected

    Cancelling an order also cancels its payment (payment_status='cancelled').
    """

    __tablename__ = "orders"

    order_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )
    order_number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.user_id"),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(30), nullable=False, default="pending", server_default=text("'pending'")
    )
    payment_status: Mapped[str] = mapped_column(
        String(30), nullable=False, default="pending", server_default=text("'pending'")
    )
    total_amount: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False)
    rental_start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    rental_end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    rental_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
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

    profile: Mapped[Profile] = relationship(lazy="raise")
    items: Mapped[List["OrderItem"]] = relationship(
        back_populates="order",
        lazy="raise",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_orders_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Order(order_number='{self.order_number}', status='{self.status}')>"


class OrderItem(Base):
    __tablename__ = "order_items"

    order_item_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )
    order_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("orders.order_id", ondelete="CASCADE"),
        nullable=False,
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("products.product_id"),
        nullable=False,
    )
    selected_size: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    unit_price: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False)
    total_price: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False)

    order: Mapped[Order] = relationship(back_populates="items", lazy="raise")
    product: Mapped[Product] = relationship(lazy="raise")

    __table_args__ = (
        Index("idx_order_items_order_id", "order_id"),
    )


class OrderStatusHistory(Base):
    """Audit row written each time an order's status is changed."""

    __tablename__ = "order_status_history"

    history_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )
    order_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("orders.order_id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(String(30), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    updated_by: Mapped[str] = mapped_column(
        String(100), nullable=False, default="admin", server_default=text("'admin'")
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
