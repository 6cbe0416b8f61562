"""
RentOK Admin Backend — Coupon Request/Response Schemas
=======================================================

What:  API contract for /api/coupons.
How:   Write payloads keep every field optional so that CouponService can
       report missing fields with the admin panel's own wording
       ("code is required") instead of FastAPI's generic 422 body.
       Type coercion still happens here: "25" becomes 25.0.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from rentok.schemas.common import Pagination

DISCOUNT_TYPES = ("percentage", "fixed")
APPLICABLE_TO = ("all", "category", "product", "vendor")


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class CouponWrite(BaseModel):
    """Body of POST /api/coupons and PUT /api/coupons/{id}."""

    code: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    discount_type: Optional[str] = Field(default=None, description="percentage or fixed")
    discount_value: Optional[float] = None
    minimum_amount: Optional[float] = None
    maximum_discount: Optional[float] = None
    usage_limit: Optional[int] = None
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    is_active: Optional[bool] = None
    applicable_to: Optional[str] = Field(default=None, description="all, category, product or vendor")
    applicable_ids: Optional[List[str]] = None


class CouponUseRequest(BaseModel):
    order_id: Optional[str] = None
    user_id: Optional[str] = None


class CartItem(BaseModel):
    """A cart line as sent by the storefront; only the IDs matter here."""

    product_id: Optional[str] = None
    category_id: Optional[str] = None
    vendor_id: Optional[str] = None

    model_config = {"extra": "allow"}


class CouponValidateRequest(BaseModel):
    code: Optional[str] = None
    amount: float = Field(default=0, description="Order amount before discount")
    items: Optional[List[CartItem]] = None


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class CouponResponse(BaseModel):
    coupon_id: uuid.UUID
    code: str
    title: str
    description: Optional[str] = None
    discount_type: str
    discount_value: float
    minimum_amount: Optional[float] = None
    maximum_discount: Optional[float] = None
    usage_limit: Optional[int] = None
    used_count: int
    valid_from: datetime
    valid_until: datetime
    is_active: bool
    applicable_to: str
    applicable_ids: Optional[List[str]] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CouponListResponse(BaseModel):
    coupons: List[CouponResponse]
    pagination: Pagination


class CouponEnvelope(BaseModel):
    coupon: CouponResponse


class CouponMutationResponse(BaseModel):
    message: str
    coupon: CouponResponse


class AppliedCoupon(BaseModel):
    """Coupon summary returned when a code validates, with the computed discount."""

    id: uuid.UUID
    code: str
    title: str
    description: Optional[str] = None
    discount_type: str
    discount_value: float
    discount_amount: float
    minimum_amount: Optional[float] = None
    maximum_discount: Optional[float] = None


class CouponValidationResponse(BaseModel):
    """
    Result of POST /api/coupons/validate.

    A rejected code is still a 200 with valid=false and the reason in
    `error`; only an unknown code is a 404.
    """

    valid: bool
    error: Optional[str] = None
    coupon: Optional[AppliedCoupon] = None
