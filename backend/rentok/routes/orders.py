"""
RentOK Admin Backend — Order Route Handlers
============================================

What:  /api/orders CRUD and the manual status-email trigger.
How:   Status emails after a PATCH are scheduled as BackgroundTasks, so they
       run after the response is sent and the transaction has committed.

POST /orders/send-status-email is registered before /orders/{order_id}.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from rentok.database import get_db_session
from rentok.exceptions import ValidationError
from rentok.schemas.common import ErrorResponse, MessageResponse
from rentok.schemas.email import OrderStatusEmail, StatusEmailResponse
from rentok.schemas.order import (
    OrderCreate,
    OrderEnvelope,
    OrderListResponse,
    OrderResponse,
    OrderUpdate,
)
from rentok.services.email_service import email_service
from rentok.services.order_service import order_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Orders"])


@router.get(
    "/orders",
    response_model=OrderListResponse,
    summary="List orders, optionally for one vendor",
)
async def list_orders(
    vendor_id: Optional[UUID] = Query(
        default=None,
        description="Only orders containing at least one of this vendor's products",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> OrderListResponse:
    orders = await order_service.list_orders(db, vendor_id=vendor_id)
    return OrderListResponse(orders=[OrderResponse.model_validate(o) for o in orders])


@router.post("/orders", response_model=MessageResponse, status_code=201)
async def create_order(
    body: OrderCreate,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await order_service.create_order(db, body)
    return MessageResponse(message="Order created successfully")


@router.post(
    "/orders/send-status-email",
    response_model=StatusEmailResponse,
    responses={
        400: {"description": "Missing required fields", "model": ErrorResponse},
        500: {"description": "Email provider rejected the message"},
    },
    summary="Send an order status update email",
)
async def send_status_email(body: OrderStatusEmail):
    if not (body.customer_email and body.order_number and body.order_status):
        raise ValidationError("Missing required fields")

    logger.info(
        "Sending status email for order %s to %s (%s → %s)",
        body.order_number, body.customer_email, body.previous_status, body.order_status,
    )
    result = await email_service.send_order_status_update_email(body)
    if not result.success:
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Failed to send email", "details": result.error},
        )
    return StatusEmailResponse(
        success=True,
        message="Email sent successfully",
        messageId=result.message_id,
    )


@router.get(
    "/orders/{order_id}",
    response_model=OrderEnvelope,
    responses={404: {"description": "Order not found", "model": ErrorResponse}},
)
async def get_order(
    order_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> OrderEnvelope:
    order = await order_service.get_order(db, order_id)
    return OrderEnvelope(order=OrderResponse.model_validate(order))


@router.patch(
    "/orders/{order_id}",
    response_model=MessageResponse,
    responses={404: {"description": "Order not found", "model": ErrorResponse}},
    summary="Update order status, payment status or other fields",
)
async def update_order(
    order_id: UUID,
    body: OrderUpdate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    notification = await order_service.update_order(db, order_id, body)
    if notification is not None:
        background_tasks.add_task(order_service.notify_status_change, notification)
    return MessageResponse(message="Order updated successfully")


@router.delete("/orders/{order_id}", response_model=MessageResponse)
async def delete_order(
    order_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await order_service.delete_order(db, order_id)
    return MessageResponse(message="Order deleted successfully")
