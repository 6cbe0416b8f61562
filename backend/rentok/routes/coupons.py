"""
RentOK Admin Backend — Coupon Route Handlers
=============================================

What:  /api/coupons: admin CRUD plus the checkout-time `validate` and `use`
       operations.
How:   Thin handlers; every rule lives in CouponService.

Route order matters: POST /coupons/validate is registered before the
/coupons/{coupon_id} routes so "validate" is never parsed as an ID.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from rentok.database import get_db_session
from rentok.exceptions import NotFoundError
from rentok.schemas.common import ErrorResponse, MessageResponse
from rentok.schemas.coupon import (
    CouponEnvelope,
    CouponListResponse,
    CouponMutationResponse,
    CouponResponse,
    CouponUseRequest,
    CouponValidateRequest,
    CouponValidationResponse,
    CouponWrite,
)
from rentok.services.coupon_service import coupon_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Coupons"])


@router.get(
    "/coupons",
    response_model=CouponListResponse,
    summary="List coupons with offset pagination",
)
async def list_coupons(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    search: str = Query(default="", description="Matches code, title or description"),
    status: str = Query(default="", description="active, inactive or expired"),
    discount_type: str = Query(default="", alias="type", description="percentage or fixed"),
    db: AsyncSession = Depends(get_db_session),
) -> CouponListResponse:
    return await coupon_service.list_coupons(
        db=db,
        page=page,
        limit=limit,
        search=search,
        status=status,
        discount_type=discount_type,
    )


@router.post(
    "/coupons",
    response_model=CouponMutationResponse,
    status_code=201,
    responses={
        400: {"description": "Invalid coupon", "model": ErrorResponse},
        409: {"description": "Duplicate code", "model": ErrorResponse},
    },
    summary="Create a coupon",
)
async def create_coupon(
    body: CouponWrite,
    db: AsyncSession = Depends(get_db_session),
) -> CouponMutationResponse:
    coupon = await coupon_service.create_coupon(db, body)
    return CouponMutationResponse(
        message="Coupon created successfully",
        coupon=CouponResponse.model_validate(coupon),
    )


@router.post(
    "/coupons/validate",
    response_model=CouponValidationResponse,
    response_model_exclude_none=True,
    responses={404: {"description": "Unknown coupon code", "model": CouponValidationResponse}},
    summary="Check a coupon code against a cart",
    description=(
        "Returns valid=true with the computed discount, or valid=false with the "
        "reason. Unknown codes return 404."
    ),
)
async def validate_coupon(
    body: CouponValidateRequest,
    db: AsyncSession = Depends(get_db_session),
):
    try:
        return await coupon_service.validate_coupon(db, body)
    except NotFoundError:
        return JSONResponse(
            status_code=404,
            content={"valid": False, "error": "Invalid coupon code"},
        )


@router.get(
    "/coupons/{coupon_id}",
    response_model=CouponEnvelope,
    responses={404: {"description": "Coupon not found", "model": ErrorResponse}},
)
async def get_coupon(
    coupon_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> CouponEnvelope:
    coupon = await coupon_service.get_coupon(db, coupon_id)
    return CouponEnvelope(coupon=CouponResponse.model_validate(coupon))


@router.put(
    "/coupons/{coupon_id}",
    response_model=CouponMutationResponse,
    responses={
        400: {"description": "Invalid coupon", "model": ErrorResponse},
        404: {"description": "Coupon not found", "model": ErrorResponse},
        409: {"description": "Duplicate code", "model": ErrorResponse},
    },
)
async def update_coupon(
    coupon_id: UUID,
    body: CouponWrite,
    db: AsyncSession = Depends(get_db_session),
) -> CouponMutationResponse:
    coupon = await coupon_service.update_coupon(db, coupon_id, body)
    return CouponMutationResponse(
        message="Coupon updated successfully",
        coupon=CouponResponse.model_validate(coupon),
    )


@router.delete("/coupons/{coupon_id}", response_model=MessageResponse)
async def delete_coupon(
    coupon_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await coupon_service.delete_coupon(db, coupon_id)
    return MessageResponse(message="Coupon deleted successfully")


@router.post(
    "/coupons/{coupon_id}/use",
    response_model=CouponMutationResponse,
    responses={
        400: {"description": "Missing order_id, or coupon not usable", "model": ErrorResponse},
        404: {"description": "Coupon not found", "model": ErrorResponse},
    },
    summary="Record one redemption of a coupon",
)
async def use_coupon(
    coupon_id: UUID,
    body: CouponUseRequest,
    db: AsyncSession = Depends(get_db_session),
) -> CouponMutationResponse:
    coupon = await coupon_service.use_coupon(db, coupon_id, body)
    return CouponMutationResponse(
        message="Coupon used successfully",
        coupon=CouponResponse.model_validate(coupon),
    )
