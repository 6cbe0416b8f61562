"""Create rental marketplace tables

Revision ID: 001
Revises: None
Create Date: 2025-01-15 00:00:00.000000+00:00

What:  Creates every table the admin backend reads or writes: accounts,
       catalog (vendors, products, customer profiles), orders with items and
       status history, coupons with usage records, and tags.
How:   PostgreSQL-specific types: UUID keys with gen_random_uuid(), TEXT[]
       arrays for product images/tags and coupon scopes, TIMESTAMPTZ.

Rollback: downgrade() drops all tables in reverse dependency order.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _uuid_pk(name: str) -> sa.Column:
    return sa.Column(
        name,
        postgresql.UUID(as_uuid=True),
        server_default=sa.text("gen_random_uuid()"),
        nullable=False,
        primary_key=True,
    )


def _timestamps() -> list:
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "admins",
        _uuid_pk("id"),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password", sa.String(255), nullable=False, comment="bcrypt hash"),
        sa.Column("phone_number", sa.String(32), nullable=True),
        sa.Column("phone_verified", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("email_verified", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("type", sa.String(20), nullable=False, comment="admin or vendor"),
        *_timestamps(),
    )

    op.create_table(
        "vendors",
        _uuid_pk("vendor_id"),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("business_name", sa.String(200), nullable=True),
    )

    op.create_table(
        "products",
        _uuid_pk("product_id"),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("images", postgresql.ARRAY(sa.Text()), nullable=True),
        sa.Column(
            "vendor_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("vendors.vendor_id"),
            nullable=True,
        ),
        sa.Column("category_id", sa.String(64), nullable=True),
        sa.Column("tags", postgresql.ARRAY(sa.String()), nullable=True, comment="tag_id values"),
    )
    # GIN index backs the "is this tag still used" containment check
    op.create_index("idx_products_tags", "products", ["tags"], postgresql_using="gin")

    op.create_table(
        "profiles",
        sa.Column("user_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(200), nullable=True),
        sa.Column("full_name", sa.String(200), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("mobile_number", sa.String(32), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state", sa.String(100), nullable=True),
        sa.Column("country", sa.String(100), nullable=True),
    )

    op.create_table(
        "orders",
        _uuid_pk("order_id"),
        sa.Column("order_number", sa.String(50), nullable=False, unique=True),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("profiles.user_id"),
            nullable=False,
        ),
        sa.Column("status", sa.String(30), nullable=False, server_default=sa.text("'pending'")),
        sa.Column(
            "payment_status", sa.String(30), nullable=False, server_default=sa.text("'pending'")
        ),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("rental_start_date", sa.Date(), nullable=True),
        sa.Column("rental_end_date", sa.Date(), nullable=True),
        sa.Column("rental_days", sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index("idx_orders_created_at", "orders", [sa.text("created_at DESC")])

    op.create_table(
        "order_items",
        _uuid_pk("order_item_id"),
        sa.Column(
            "order_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("orders.order_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "product_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("products.product_id"),
            nullable=False,
        ),
        sa.Column("selected_size", sa.String(20), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("total_price", sa.Numeric(12, 2), nullable=False),
    )
    op.create_index("idx_order_items_order_id", "order_items", ["order_id"])

    op.create_table(
        "order_status_history",
        _uuid_pk("history_id"),
        sa.Column(
            "order_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("orders.order_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("status", sa.String(30), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("updated_by", sa.String(100), nullable=False, server_default=sa.text("'admin'")),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    )

    op.create_table(
        "coupons",
        _uuid_pk("coupon_id"),
        sa.Column("code", sa.String(50), nullable=False, unique=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("discount_type", sa.String(20), nullable=False, comment="percentage or fixed"),
        sa.Column("discount_value", sa.Numeric(10, 2), nullable=False),
        sa.Column("minimum_amount", sa.Numeric(10, 2), nullable=True),
        sa.Column("maximum_discount", sa.Numeric(10, 2), nullable=True),
        sa.Column("usage_limit", sa.Integer(), nullable=True),
        sa.Column("used_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("valid_from", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("valid_until", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("applicable_to", sa.String(20), nullable=False, server_default=sa.text("'all'")),
        sa.Column("applicable_ids", postgresql.ARRAY(sa.String()), nullable=True),
        *_timestamps(),
    )
    op.create_index("idx_coupons_created_at", "coupons", [sa.text("created_at DESC")])

    op.create_table(
        "coupon_usage",
        _uuid_pk("usage_id"),
        sa.Column(
            "coupon_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("coupons.coupon_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("order_id", sa.String(64), nullable=False),
        sa.Column(
            "used_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    )

    op.create_table(
        "tags",
        _uuid_pk("tag_id"),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("slug", sa.String(120), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("color", sa.String(7), nullable=False, server_default=sa.text("'#9A2143'")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("usage_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        *_timestamps(),
    )
    op.create_index("idx_tags_sort_order", "tags", ["sort_order"])


def downgrade() -> None:
    """Drops every table. Destructive: all marketplace data is lost."""
    op.drop_index("idx_tags_sort_order", table_name="tags")
    op.drop_table("tags")
    op.drop_table("coupon_usage")
    op.drop_index("idx_coupons_created_at", table_name="coupons")
    op.drop_table("coupons")
    op.drop_table("order_status_history")
    op.drop_index("idx_order_items_order_id", table_name="order_items")
    op.drop_table("order_items")
    op.drop_index("idx_orders_created_at", table_name="orders")
    op.drop_table("orders")
    op.drop_table("profiles")
    op.drop_index("idx_products_tags", table_name="products")
    op.drop_table("products")
    op.drop_table("vendors")
    op.drop_table("admins")
