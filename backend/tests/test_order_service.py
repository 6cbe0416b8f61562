"""
RentOK Admin Backend — Order Service Tests
===========================================

Tests for order status updates (cancellation rule, status history,
notification building), lookup and deletion.
"""

import uuid
from datetime import date, datetime, timezone

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from rentok.exceptions import NotFoundError
from rentok.models.catalog import Product, Profile
from rentok.models.order import Order, OrderItem, OrderStatusHistory
from rentok.schemas.email import EmailResult, OrderStatusEmail
from rentok.schemas.order import OrderUpdate
from rentok.services.order_service import OrderService, build_status_email

NOW = datetime(2025, 6, 15, 9, 30, tzinfo=timezone.utc)


def make_order(email="priya@example.com", status="confirmed") -> Order:
    profile = Profile(user_id=uuid.uuid4(), name="Priya", email=email)
    product = Product(product_id=uuid.uuid4(), title="Silk Saree", images=["https://ik.test/a.jpg"])
    item = OrderItem(
        order_item_id=uuid.uuid4(),
        product_id=product.product_id,
        quantity=2,
        unit_price=1500.0,
        total_price=3000.0,
        product=product,
    )
    return Order(
        order_id=uuid.uuid4(),
        order_number="RO-1001",
        user_id=profile.user_id,
        status=status,
        payment_status="paid",
        total_amount=3000.0,
        rental_start_date=date(2025, 7, 1),
        rental_end_date=date(2025, 7, 4),
        rental_days=3,
        created_at=NOW,
        updated_at=NOW,
        profile=profile,
        items=[item],
    )


def order_result(order):
    result = MagicMock()
    result.scalar_one_or_none.return_value = order
    return result


class TestBuildStatusEmail:

    def test_carries_previous_status_and_items(self):
        email = build_status_email(make_order(), "shipped", "Courier: BlueDart")

        assert email.customer_email == "priya@example.com"
        assert email.customer_name == "Priya"
        assert email.previous_status == "confirmed"
        assert email.order_status == "shipped"
        assert email.rental_start_date == "2025-07-01"
        assert email.products[0].title == "Silk Saree"
        assert email.products[0].quantity == 2
        assert email.products[0].image == "https://ik.test/a.jpg"
        assert email.notes == "Courier: BlueDart"

    def test_no_email_on_file(self):
        assert build_status_email(make_order(email=None), "shipped") is None


class TestOrderService:

    def setup_method(self):
        self.service = OrderService()

    @pytest.mark.asyncio
    async def test_get_missing_order(self, mock_db_session):
        mock_db_session.execute.return_value = order_result(None)

        with pytest.raises(NotFoundError) as exc:
            await self.service.get_order(mock_db_session, uuid.uuid4())
        assert exc.value.message == "Order not found"

    @pytest.mark.asyncio
    async def test_cancelling_also_cancels_payment(self, mock_db_session):
        order = make_order()
        mock_db_session.execute.return_value = order_result(order)

        notification = await self.service.update_order(
            mock_db_session, order.order_id, OrderUpdate(status="Cancelled"), now=NOW
        )

        assert order.status == "Cancelled"
        assert order.payment_status == "cancelled"
        assert notification.previous_status == "confirmed"
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_status_change_writes_history(self, mock_db_session):
        order = make_order()
        mock_db_session.execute.return_value = order_result(order)

        await self.service.update_order(
            mock_db_session,
            order.order_id,
            OrderUpdate(status="shipped", notes="Out for delivery", updated_by="ops"),
            now=NOW,
        )

        mock_db_session.begin_nested.assert_called_once()
        history = mock_db_session.add.call_args.args[0]
        assert isinstance(history, OrderStatusHistory)
        assert history.status == "shipped"
        assert history.notes == "Out for delivery"
        assert history.updated_by == "ops"
        assert order.payment_status == "paid"

    @pytest.mark.asyncio
    async def test_payment_only_change_has_no_history_or_email(self, mock_db_session):
        order = make_order()
        mock_db_session.execute.return_value = order_result(order)

        notification = await self.service.update_order(
            mock_db_session, order.order_id, OrderUpdate(payment_status="refunded"), now=NOW
        )

        assert notification is None
        assert order.payment_status == "refunded"
        assert order.status == "confirmed"
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_status_change_without_customer_email(self, mock_db_session):
        order = make_order(email=None)
        mock_db_session.execute.return_value = order_result(order)

        notification = await self.service.update_order(
            mock_db_session, order.order_id, OrderUpdate(status="delivered"), now=NOW
        )

        assert notification is None
        assert order.status == "delivered"
        mock_db_session.begin_nested.assert_called_once()

    @pytest.mark.asyncio
    async def test_update_missing_order(self, mock_db_session):
        mock_db_session.execute.return_value = order_result(None)

        with pytest.raises(NotFoundError):
            await self.service.update_order(
                mock_db_session, uuid.uuid4(), OrderUpdate(status="shipped")
            )
        mock_db_session.flush.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_order_removes_dependents_first(self, mock_db_session):
        await self.service.delete_order(mock_db_session, uuid.uuid4())

        assert mock_db_session.execute.await_count == 3
        tables = [
            call.args[0].table.name for call in mock_db_session.execute.await_args_list
        ]
        assert tables == ["order_items", "order_status_history", "orders"]

    @pytest.mark.asyncio
    async def test_notify_status_change_sends_email(self):
        notification = OrderStatusEmail(
            customer_email="priya@example.com", order_number="RO-1001", order_status="shipped"
        )
        with patch("rentok.services.order_service.email_service") as mock_email:
            mock_email.send_order_status_update_email = AsyncMock(
                return_value=EmailResult(success=True, data={"messageId": "m-1"})
            )
            await self.service.notify_status_change(notification)

        mock_email.send_order_status_update_email.assert_awaited_once_with(notification)
