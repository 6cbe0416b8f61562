"""
RentOK Admin Backend — Order Service
=====================================

What:  Order listing, detail, creation, status updates and deletion.
Who:   Called by the /api/orders route handlers.

Status Update Flow (PATCH /api/orders/{id}):
    ┌──────────────┐    ┌──────────────┐    ┌──────────────┐    ┌──────────────┐
    │ Load order + │───▶│ Apply column │───▶│ History row  │───▶│ Status email │
    │ customer     │    │ changes      │    │ (savepoint)  │    │ (background) │
    └──────────────┘    └──────────────┘    └──────────────┘    └──────────────┘

    - status "cancelled" (any case) also sets payment_status="cancelled"
    - the history row and the email happen only when `status` was sent
    - a failed history insert is logged and does not fail the update
    - the email is returned to the route as an OrderStatusEmail and sent by
      a background task after the response, so a slow or failing provider
      never affects the request
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from rentok.exceptions import DatabaseError, NotFoundError
from rentok.models.catalog import Product
from rentok.models.order import Order, OrderItem, OrderStatusHistory
from rentok.schemas.email import EmailProduct, OrderStatusEmail
from rentok.schemas.order import OrderCreate, OrderUpdate
from rentok.services.email_service import email_service

logger = logging.getLogger(__name__)

CANCELLED = "cancelled"

# Everything OrderResponse serializes: customer, items → product → vendor
ORDER_DETAIL_OPTIONS = (
    selectinload(Order.profile),
    selectinload(Order.items).selectinload(OrderItem.product).selectinload(Product.vendor),
)


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def build_status_email(
    order: Order,
    new_status: str,
    notes: Optional[str] = None,
) -> Optional[OrderStatusEmail]:
    """
    Status email for `order`, which must still hold its previous status.

    Returns None when the customer has no email address on file.
    """
    profile = order.profile
    if profile is None or not profile.email:
        return None

    products = []
    for item in order.items:
        product = item.product
        products.append(
            EmailProduct(
                title=product.title if product else "Product",
                quantity=item.quantity,
                image=(product.images or [None])[0] if product else None,
            )
        )

    return OrderStatusEmail(
        customer_name=profile.name or profile.full_name or "Customer",
        customer_email=profile.email,
        order_number=order.order_number,
        order_status=new_status,
        previous_status=order.status,
        order_date=_iso(order.created_at),
        rental_start_date=_iso(order.rental_start_date),
        rental_end_date=_iso(order.rental_end_date),
        rental_days=order.rental_days,
        total_amount=order.total_amount,
        products=products,
        notes=notes or None,
    )


class OrderService:
    """Business logic for orders. Stateless; one instance is shared."""

    async def list_orders(
        self, db: AsyncSession, vendor_id: Optional[UUID] = None
    ) -> List[Order]:
        """
        Orders newest first, with customer and items loaded.

        With `vendor_id`, only orders containing at least one item of that
        vendor's products are returned (the whole order, all items).
        Orders without any items are never listed.
        """
        query = (
            select(Order)
            .options(*ORDER_DETAIL_OPTIONS)
            .where(Order.items.any())
            .order_by(desc(Order.created_at))
        )
        if vendor_id is not None:
            query = query.where(
                Order.items.any(OrderItem.product.has(Product.vendor_id == vendor_id))
            )
        try:
            result = await db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing orders: %s", str(e), exc_info=True)
            raise DatabaseError(message="Failed to fetch orders")

    async def get_order(self, db: AsyncSession, order_id: UUID) -> Order:
        try:
            result = await db.execute(
                select(Order).options(*ORDER_DETAIL_OPTIONS).where(Order.order_id == order_id)
            )
            order = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching order %s: %s", order_id, str(e))
            raise DatabaseError(message="Failed to fetch order")
        if order is None:
            raise NotFoundError(resource="Order", resource_id=str(order_id))
        return order

    async def create_order(self, db: AsyncSession, payload: OrderCreate) -> Order:
        order = Order(**payload.model_dump())
        try:
            db.add(order)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating order %s: %s", payload.order_number, str(e))
            raise DatabaseError(message="Failed to create order")
        logger.info("Order created: %s", order.order_number)
        return order

    async def update_order(
        self,
        db: AsyncSession,
        order_id: UUID,
        payload: OrderUpdate,
        now: Optional[datetime] = None,
    ) -> Optional[OrderStatusEmail]:
        """
        Apply a partial update.

        Returns:
            The status email to send, or None when `status` was not changed
            or the customer has no email address.

        Raises:
            NotFoundError: no order with this id
        """
        changes = payload.order_changes()
        new_status = changes.get("status")
        if new_status and new_status.lower() == CANCELLED:
            changes["payment_status"] = CANCELLED
            logger.info("Order %s cancelled; payment status set to cancelled", order_id)

        order = await self.get_order(db, order_id)
        # Built before the update so it carries the previous status
        notification = build_status_email(order, new_status, payload.notes) if new_status else None

        if changes:
            for key, value in changes.items():
                setattr(order, key, value)
            order.updated_at = now or datetime.now(timezone.utc)
            try:
                await db.flush()
            except SQLAlchemyError as e:
                logger.error("Database error updating order %s: %s", order_id, str(e))
                raise DatabaseError(message="Failed to update order")

        if not new_status:
            if "payment_status" in changes:
                logger.info(
                    "Order %s payment status → %s (no email for payment-only changes)",
                    order_id, changes["payment_status"],
                )
            return None

        try:
            async with db.begin_nested():
                db.add(
                    OrderStatusHistory(
                        order_id=order.order_id,
                        status=new_status,
                        notes=payload.notes or None,
                        updated_by=payload.updated_by or "admin",
                    )
                )
        except SQLAlchemyError as e:
            logger.warning("Could not record status history for order %s: %s", order_id, str(e))

        if notification is None:
            logger.warning("Order %s: status email skipped, customer has no email", order_id)
        return notification

    async def notify_status_change(self, notification: OrderStatusEmail) -> None:
        """Background task: send the status email and log the outcome."""
        result = await email_service.send_order_status_update_email(notification)
        if result.success:
            logger.info(
                "Status email for order %s sent to %s (id=%s)",
                notification.order_number, notification.customer_email, result.message_id,
            )
        else:
            logger.error(
                "Status email for order %s failed: %s",
                notification.order_number, result.error,
            )

    async def delete_order(self, db: AsyncSession, order_id: UUID) -> None:
        """Remove items, then status history, then the order itself."""
        try:
            await db.execute(delete(OrderItem).where(OrderItem.order_id == order_id))
            await db.execute(
                delete(OrderStatusHistory).where(OrderStatusHistory.order_id == order_id)
            )
            await db.execute(delete(Order).where(Order.order_id == order_id))
        except SQLAlchemyError as e:
            logger.error("Database error deleting order %s: %s", order_id, str(e))
            raise DatabaseError(message="Failed to delete order")
        logger.info("Order deleted: %s", order_id)


# ── Singleton Instance ────────────────────────────────────────────────────
order_service = OrderService()
