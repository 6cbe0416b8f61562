# Importing every model registers its table with Base.metadata (used by Alembic)
from rentok.models.admin import Admin
from rentok.models.catalog import Product, Profile, Vendor
from rentok.models.coupon import Coupon, CouponUsage
from rentok.models.order import Order, OrderItem, OrderStatusHistory
from rentok.models.tag import Tag

__all__ = [
    "Admin",
    "Coupon",
    "CouponUsage",
    "Order",
    "OrderItem",
    "OrderStatusHistory",
    "Product",
    "Profile",
    "Tag",
    "Vendor",
]
