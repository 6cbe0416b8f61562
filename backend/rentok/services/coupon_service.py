"""
RentOK Admin Backend — Coupon Service
======================================

What:  CRUD for discount coupons plus the two checkout-time operations:
       validating a code against a cart and recording a redemption.
Who:   Called by the /api/coupons route handlers.

Validation Rules (create and update):
    - code, title, discount_type, discount_value, valid_from, valid_until
      are required ("<field> is required")
    - discount_type is "percentage" or "fixed"
    - discount_value > 0, and ≤ 100 for percentages
    - valid_from strictly before valid_until
    - code is stored upper-cased and is unique

Discount Math (validate):
    percentage → amount × value / 100, capped by maximum_discount
    fixed      → value
    then capped by the order amount so the total never goes negative.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, desc, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rentok.exceptions import ConflictError, DatabaseError, NotFoundError, ValidationError
from rentok.models.coupon import Coupon, CouponUsage
from rentok.schemas.common import Pagination
from rentok.schemas.coupon import (
    APPLICABLE_TO,
    DISCOUNT_TYPES,
    AppliedCoupon,
    CartItem,
    CouponListResponse,
    CouponResponse,
    CouponUseRequest,
    CouponValidateRequest,
    CouponValidationResponse,
    CouponWrite,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("code", "title", "discount_type", "discount_value", "valid_from", "valid_until")

# applicable_to → the cart-item attribute matched against applicable_ids
APPLICABILITY_KEYS = {
    "category": "category_id",
    "product": "product_id",
    "vendor": "vendor_id",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _plain_number(value: float) -> str:
    # 500.0 → "500", 499.5 → "499.5"
    return str(int(value)) if float(value).is_integer() else str(value)


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps from the admin form are taken as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ══════════════════════════════════════════════════════════════════════════
# Pure rules (no database access)
# ══════════════════════════════════════════════════════════════════════════


def check_coupon_payload(payload: CouponWrite) -> dict:
    """
    Apply the create/update rules and return the column values to write.

    Raises:
        ValidationError: first rule that fails, with the admin panel's wording
    """
    for field in REQUIRED_FIELDS:
        # Zero and empty strings count as missing
        if not getattr(payload, field):
            raise ValidationError(f"{field} is required", field=field)

    if payload.discount_type not in DISCOUNT_TYPES:
        raise ValidationError(
            'discount_type must be either "percentage" or "fixed"', field="discount_type"
        )
    if payload.discount_value <= 0:
        raise ValidationError("discount_value must be greater than 0", field="discount_value")
    if payload.discount_type == "percentage" and payload.discount_value > 100:
        raise ValidationError("Percentage discount cannot exceed 100%", field="discount_value")

    valid_from = _as_utc(payload.valid_from)
    valid_until = _as_utc(payload.valid_until)
    if valid_from >= valid_until:
        raise ValidationError("valid_until must be after valid_from", field="valid_until")

    if payload.applicable_to and payload.applicable_to not in APPLICABLE_TO:
        raise ValidationError(
            f"applicable_to must be one of {', '.join(APPLICABLE_TO)}", field="applicable_to"
        )

    return {
        "code": payload.code.strip().upper(),
        "title": payload.title,
        "description": payload.description or None,
        "discount_type": payload.discount_type,
        "discount_value": payload.discount_value,
        "minimum_amount": payload.minimum_amount or None,
        "maximum_discount": payload.maximum_discount or None,
        "usage_limit": payload.usage_limit or None,
        "valid_from": valid_from,
        "valid_until": valid_until,
        "is_active": True if payload.is_active is None else payload.is_active,
        "applicable_to": payload.applicable_to or "all",
        "applicable_ids": payload.applicable_ids or None,
    }


def usage_exhausted(coupon: Coupon) -> bool:
    """A usage_limit of None (or 0) means unlimited."""
    return bool(coupon.usage_limit) and coupon.used_count >= coupon.usage_limit


def is_applicable(coupon: Coupon, items: Optional[List[CartItem]]) -> bool:
    """
    True when the coupon applies to at least one cart item.

    Coupons scoped to "all", and carts sent without items, always apply.
    """
    if coupon.applicable_to == "all" or items is None:
        return True
    key = APPLICABILITY_KEYS.get(coupon.applicable_to)
    if key is None:
        return False
    ids = set(coupon.applicable_ids or [])
    return any(getattr(item, key) in ids for item in items)


def compute_discount(coupon: Coupon, amount: float) -> float:
    if coupon.discount_type == "percentage":
        discount = amount * coupon.discount_value / 100
        if coupon.maximum_discount and discount > coupon.maximum_discount:
            discount = coupon.maximum_discount
    else:
        discount = coupon.discount_value
    return min(discount, amount)


def rejection_reason(
    coupon: Coupon,
    amount: float,
    items: Optional[List[CartItem]],
    now: datetime,
) -> Optional[str]:
    """Why a known coupon cannot be applied to this cart, or None if it can."""
    if not coupon.is_active:
        return "Coupon is not active"
    if now < _as_utc(coupon.valid_from):
        return "Coupon is not yet valid"
    if now > _as_utc(coupon.valid_until):
        return "Coupon has expired"
    if usage_exhausted(coupon):
        return "Coupon usage limit exceeded"
    if coupon.minimum_amount and amount < coupon.minimum_amount:
        return f"Minimum order amount of ₹{_plain_number(coupon.minimum_amount)} required"
    if not is_applicable(coupon, items):
        return "Coupon is not applicable to selected items"
    return None


# ══════════════════════════════════════════════════════════════════════════
# Service
# ══════════════════════════════════════════════════════════════════════════


class CouponService:
    """
    Business logic for coupons.

    Database failures are logged with their driver detail and re-raised as
    DatabaseError; rule failures raise ValidationError / ConflictError /
    NotFoundError, which the global handlers map to 400 / 409 / 404.
    """

    async def list_coupons(
        self,
        db: AsyncSession,
        page: int = 1,
        limit: int = 10,
        search: str = "",
        status: str = "",
        discount_type: str = "",
        now: Optional[datetime] = None,
    ) -> CouponListResponse:
        """
        Newest-first page of coupons.

        `status` is active | inactive | expired (valid_until in the past);
        any other value applies no status filter.
        """
        now = now or _utcnow()
        filters = []
        if search:
            pattern = f"%{search}%"
            filters.append(
                or_(
                    Coupon.code.ilike(pattern),
                    Coupon.title.ilike(pattern),
                    Coupon.description.ilike(pattern),
                )
            )
        if status == "active":
            filters.append(Coupon.is_active.is_(True))
        elif status == "inactive":
            filters.append(Coupon.is_active.is_(False))
        elif status == "expired":
            filters.append(Coupon.valid_until < now)
        if discount_type:
            filters.append(Coupon.discount_type == discount_type)

        try:
            query = (
                select(Coupon)
                .where(*filters)
                .order_by(desc(Coupon.created_at))
                .offset((page - 1) * limit)
                .limit(limit)
            )
            result = await db.execute(query)
            coupons = list(result.scalars().all())

            count_result = await db.execute(
                select(func.count(Coupon.coupon_id)).where(*filters)
            )
            total = count_result.scalar() or 0
        except SQLAlchemyError as e:
            logger.error("Database error listing coupons: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "list_coupons"})

        return CouponListResponse(
            coupons=[CouponResponse.model_validate(c) for c in coupons],
            pagination=Pagination.build(page=page, limit=limit, total=total),
        )

    async def get_coupon(self, db: AsyncSession, coupon_id: UUID) -> Coupon:
        try:
            coupon = await db.get(Coupon, coupon_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching coupon %s: %s", coupon_id, str(e))
            raise DatabaseError(context={"coupon_id": str(coupon_id)})
        if coupon is None:
            raise NotFoundError(resource="Coupon", resource_id=str(coupon_id))
        return coupon

    async def _ensure_code_free(
        self, db: AsyncSession, code: str, exclude_id: Optional[UUID] = None
    ) -> None:
        query = select(Coupon.coupon_id).where(Coupon.code == code)
        if exclude_id is not None:
            query = query.where(Coupon.coupon_id != exclude_id)
        result = await db.execute(query)
        if result.scalar_one_or_none() is not None:
            raise ConflictError("Coupon code already exists", context={"code": code})

    async def create_coupon(
        self, db: AsyncSession, payload: CouponWrite, now: Optional[datetime] = None
    ) -> Coupon:
        values = check_coupon_payload(payload)
        await self._ensure_code_free(db, values["code"])

        now = now or _utcnow()
        coupon = Coupon(**values, used_count=0, created_at=now, updated_at=now)
        try:
            db.add(coupon)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating coupon %s: %s", values["code"], str(e))
            raise DatabaseError(context={"operation": "create_coupon"})

        logger.info("Coupon created: %s (%s)", coupon.code, coupon.coupon_id)
        return coupon

    async def update_coupon(
        self,
        db: AsyncSession,
        coupon_id: UUID,
        payload: CouponWrite,
        now: Optional[datetime] = None,
    ) -> Coupon:
        values = check_coupon_payload(payload)
        await self._ensure_code_free(db, values["code"], exclude_id=coupon_id)
        coupon = await self.get_coupon(db, coupon_id)

        for key, value in values.items():
            setattr(coupon, key, value)
        coupon.updated_at = now or _utcnow()
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating coupon %s: %s", coupon_id, str(e))
            raise DatabaseError(context={"coupon_id": str(coupon_id)})

        logger.info("Coupon updated: %s", coupon_id)
        return coupon

    async def delete_coupon(self, db: AsyncSession, coupon_id: UUID) -> None:
        try:
            await db.execute(delete(Coupon).where(Coupon.coupon_id == coupon_id))
        except SQLAlchemyError as e:
            logger.error("Database error deleting coupon %s: %s", coupon_id, str(e))
            raise DatabaseError(context={"coupon_id": str(coupon_id)})
        logger.info("Coupon deleted: %s", coupon_id)

    async def use_coupon(
        self,
        db: AsyncSession,
        coupon_id: UUID,
        payload: CouponUseRequest,
        now: Optional[datetime] = None,
    ) -> Coupon:
        """
        Record one redemption of a coupon against an order.

        The usage-history row is best effort: it is written in a savepoint
        and a failure there is logged without undoing the counter increment.
        """
        if not payload.order_id:
            raise ValidationError("Order ID is required", field="order_id")

        coupon = await self.get_coupon(db, coupon_id)
        now = now or _utcnow()

        if not coupon.is_active:
            raise ValidationError("Coupon is not active")
        if usage_exhausted(coupon):
            raise ValidationError("Coupon usage limit exceeded")
        if now > _as_utc(coupon.valid_until):
            raise ValidationError("Coupon has expired")

        coupon.used_count += 1
        coupon.updated_at = now
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating coupon usage %s: %s", coupon_id, str(e))
            raise DatabaseError(message="Failed to update coupon usage")

        if payload.user_id:
            try:
                async with db.begin_nested():
                    db.add(
                        CouponUsage(
                            coupon_id=coupon.coupon_id,
                            user_id=payload.user_id,
                            order_id=payload.order_id,
                            used_at=now,
                        )
                    )
            except SQLAlchemyError as e:
                logger.warning(
                    "Could not record usage of coupon %s for order %s: %s",
                    coupon_id, payload.order_id, str(e),
                )

        logger.info(
            "Coupon %s used for order %s (%d/%s)",
            coupon.code, payload.order_id, coupon.used_count, coupon.usage_limit or "∞",
        )
        return coupon

    async def validate_coupon(
        self,
        db: AsyncSession,
        payload: CouponValidateRequest,
        now: Optional[datetime] = None,
    ) -> CouponValidationResponse:
        """
        Check a code against a cart and compute the discount.

        Raises:
            ValidationError: no code in the request
            NotFoundError:   no coupon with that code
        """
        if not payload.code:
            raise ValidationError("Coupon code is required", field="code")

        code = payload.code.strip().upper()
        try:
            result = await db.execute(select(Coupon).where(Coupon.code == code))
            coupon = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error validating coupon %s: %s", code, str(e))
            raise DatabaseError(context={"code": code})
        if coupon is None:
            raise NotFoundError(resource="Coupon", resource_id=code)

        reason = rejection_reason(coupon, payload.amount, payload.items, now or _utcnow())
        if reason:
            logger.info("Coupon %s rejected: %s", code, reason)
            return CouponValidationResponse(valid=False, error=reason)

        return CouponValidationResponse(
            valid=True,
            coupon=AppliedCoupon(
                id=coupon.coupon_id,
                code=coupon.code,
                title=coupon.title,
                description=coupon.description,
                discount_type=coupon.discount_type,
                discount_value=coupon.discount_value,
                discount_amount=compute_discount(coupon, payload.amount),
                minimum_amount=coupon.minimum_amount,
                maximum_discount=coupon.maximum_discount,
            ),
        )


# ── Singleton Instance ────────────────────────────────────────────────────
coupon_service = CouponService()
