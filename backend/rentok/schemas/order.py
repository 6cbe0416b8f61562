"""
RentOK Admin Backend — Order Request/Response Schemas
======================================================

What:  API contract for /api/orders.

Nested output keys follow the admin panel's data provider, which was written
against table names: an order carries `profiles` and `order_items`, an item
carries `products`, a product carries `vendors`. The ORM relationship
attributes are singular (`profile`, `items`, `product`, `vendor`), so the
response models read them through validation aliases.
"""

import uuid
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class VendorSummary(BaseModel):
    vendor_id: uuid.UUID
    name: str
    email: str
    phone: Optional[str] = None
    business_name: Optional[str] = None

    model_config = {"from_attributes": True}


class ProductSummary(BaseModel):
    product_id: uuid.UUID
    title: str
    images: Optional[List[str]] = None
    vendor_id: Optional[uuid.UUID] = None
    vendors: Optional[VendorSummary] = Field(default=None, validation_alias="vendor")

    model_config = {"from_attributes": True}


class CustomerProfile(BaseModel):
    user_id: uuid.UUID
    name: Optional[str] = None
    full_name: Optional[str] = None
    email: Optional[str] = None
    mobile_number: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None

    model_config = {"from_attributes": True}


class OrderItemResponse(BaseModel):
    order_item_id: uuid.UUID
    product_id: uuid.UUID
    selected_size: Optional[str] = None
    quantity: int
    unit_price: float
    total_price: float
    products: Optional[ProductSummary] = Field(default=None, validation_alias="product")

    model_config = {"from_attributes": True}


class OrderResponse(BaseModel):
    order_id: uuid.UUID
    order_number: str
    user_id: uuid.UUID
    status: str
    payment_status: str
    total_amount: float
    rental_start_date: Optional[date] = None
    rental_end_date: Optional[date] = None
    rental_days: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    profiles: Optional[CustomerProfile] = Field(default=None, validation_alias="profile")
    order_items: List[OrderItemResponse] = Field(default_factory=list, validation_alias="items")

    model_config = {"from_attributes": True}


class OrderListResponse(BaseModel):
    orders: List[OrderResponse]


class OrderEnvelope(BaseModel):
    order: OrderResponse


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class OrderCreate(BaseModel):
    """
    Body of POST /api/orders. Unknown keys are dropped so only real
    `orders` columns reach the INSERT.
    """

    order_number: str
    user_id: uuid.UUID
    status: str = "pending"
    payment_status: str = "pending"
    total_amount: float
    rental_start_date: Optional[date] = None
    rental_end_date: Optional[date] = None
    rental_days: Optional[int] = None

    model_config = {"extra": "ignore"}


class OrderUpdate(BaseModel):
    """
    Body of PATCH /api/orders/{id}.

    `notes` and `updated_by` are not order columns; they only feed the
    status-history row written when `status` changes.
    """

    status: Optional[str] = None
    payment_status: Optional[str] = None
    total_amount: Optional[float] = None
    rental_start_date: Optional[date] = None
    rental_end_date: Optional[date] = None
    rental_days: Optional[int] = None
    notes: Optional[str] = None
    updated_by: Optional[str] = None

    model_config = {"extra": "ignore"}

    def order_changes(self) -> dict:
        """Fields the client actually sent that map to `orders` columns."""
        return self.model_dump(exclude_unset=True, exclude={"notes", "updated_by"})
