"""
RentOK Admin Backend — Catalog SQLAlchemy Models
=================================================

What:  ORM models for `vendors`, `products` and customer `profiles`.
Who:   Read by OrderService (order detail joins) and TagService (tag usage
       check before delete). This backend does not manage these tables;
       they are written by the storefront and the vendor onboarding flow.
"""

import uuid
from typing import List, Optional

from sqlalchemy import ForeignKey, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import ARRAY, UUID

from rentok.database import Base


class Vendor(Base):
    __tablename__ = "vendors"

    vendor_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    business_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)


class Product(Base):
    """
    A rentable product.

    `tags` holds tag IDs (as strings); TagService refuses to delete a tag
    that appears here.
    """

    __tablename__ = "products"

    product_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    images: Mapped[Optional[List[str]]] = mapped_column(ARRAY(Text), nullable=True)
    vendor_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("vendors.vendor_id"),
        nullable=True,
    )
    category_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    tags: Mapped[Optional[List[str]]] = mapped_column(ARRAY(String), nullable=True)

    vendor: Mapped[Optional[Vendor]] = relationship(lazy="raise")

    __table_args__ = (
        Index("idx_products_tags", "tags", postgresql_using="gin"),
    )


class Profile(Base):
    """Customer profile; one per storefront user."""

    __tablename__ = "profiles"

    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True)
    name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    full_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    mobile_number: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    country: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
