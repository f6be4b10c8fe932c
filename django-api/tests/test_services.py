"""Unit tests for the checkout and order services.

These test orchestration and domain error mapping against in-memory doubles.
Run with: pytest tests/test_services.py -v
"""

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from ticketing.domain import DiscountKind, Money, OrderStatus
from ticketing.domain.errors import (
    GatewayUnavailableError,
    InsufficientInventoryError,
    InvalidIdentifierError,
    OrderNotFoundError,
    OrderNotPaidError,
    TicketNotFoundError,
    TicketUnavailableError,
)
from ticketing.services.checkout_service import CheckoutRequest, CheckoutService
from ticketing.services.order_service import OrderService
from tests.fakes import FakePaymentGateway, make_code, make_ticket

NOW = datetime(2026, 6, 1, 20, 0, tzinfo=timezone.utc)


def checkout_request(ticket, quantity=1, discount_code=None, buyer_id=None) -> CheckoutRequest:
    return CheckoutRequest(
        event_id=str(ticket.event_id),
        ticket_id=str(ticket.id),
        quantity=quantity,
        buyer_email="buyer@example.com",
        success_url="https://shop.example/success",
        cancel_url="https://shop.example/cancel",
        discount_code=discount_code,
        buyer_id=buyer_id,
    )


@pytest.fixture
def service(store, gateway) -> CheckoutService:
    return CheckoutService(store, gateway, clock=lambda: NOW)


class TestCheckoutService:
    """Tests for CheckoutService.start_checkout."""

    def test_creates_pending_order_and_session(self, service, store, gateway):
        """Ticket at 20.00, quantity 2, no discount: total 40.00, order pending."""
        ticket = store.add_ticket(make_ticket(price="20.00"))

        result = service.start_checkout(checkout_request(ticket, quantity=2))

        order = store.orders[result.order_id]
        assert order.status is OrderStatus.PENDING
        assert order.total_amount == Money(Decimal("40.00"))
        assert order.unit_price == Money(Decimal("20.00"))
        assert order.discount_amount == Money.zero()
        assert order.checkout_session_id == result.session_id
        assert result.checkout_url.startswith("https://checkout.stripe.test/")

    def test_gateway_receives_effective_price_and_correlation(self, service, store, gateway):
        ticket = store.add_ticket(make_ticket(price="20.00"))
        store.add_code(make_code(ticket.event_id, code="HALF", value="50"))

        result = service.start_checkout(
            checkout_request(ticket, quantity=3, discount_code="half", buyer_id="user-7")
        )

        sent = gateway.requests[0]
        assert sent.unit_amount == Money(Decimal("10.00"))
        assert sent.quantity == 3
        assert sent.correlation.order_id == result.order_id
        assert sent.correlation.ticket_id == ticket.id
        assert sent.correlation.event_id == ticket.event_id
        assert sent.correlation.buyer_id == "user-7"
        assert sent.unit_amount * sent.quantity == store.orders[result.order_id].total_amount

    def test_percentage_discount_is_captured(self, service, store):
        """Ticket at 20.00, quantity 1, 50% code: effective 10.00, total 10.00."""
        ticket = store.add_ticket(make_ticket(price="20.00"))
        code = store.add_code(make_code(ticket.event_id, kind=DiscountKind.PERCENTAGE, value="50"))

        result = service.start_checkout(checkout_request(ticket, discount_code="HALF"))

        order = store.orders[result.order_id]
        assert order.total_amount == Money(Decimal("10.00"))
        assert order.discount_amount == Money(Decimal("10.00"))
        assert order.discount_code_id == code.id
        assert store.codes[code.id].used_count == 0

    @pytest.mark.parametrize("discount_code", ["NOPE", "", "   "])
    def test_unknown_code_is_silently_ignored(self, service, store, discount_code):
        ticket = store.add_ticket(make_ticket(price="20.00"))

        result = service.start_checkout(checkout_request(ticket, discount_code=discount_code))

        order = store.orders[result.order_id]
        assert order.total_amount == Money(Decimal("20.00"))
        assert order.discount_code_id is None

    def test_inactive_code_is_silently_ignored(self, service, store):
        ticket = store.add_ticket(make_ticket(price="20.00"))
        store.add_code(make_code(ticket.event_id, is_active=False))

        result = service.start_checkout(checkout_request(ticket, discount_code="HALF"))

        assert store.orders[result.order_id].total_amount == Money(Decimal("20.00"))

    def test_code_of_another_event_is_ignored(self, service, store):
        ticket = store.add_ticket(make_ticket(price="20.00"))
        store.add_code(make_code(make_ticket().event_id, code="HALF"))

        result = service.start_checkout(checkout_request(ticket, discount_code="HALF"))

        assert store.orders[result.order_id].discount_code_id is None

    def test_sold_out_ticket_creates_no_order(self, service, store, gateway):
        """max_quantity=1, sold_quantity=1: InsufficientInventory, no order."""
        ticket = store.add_ticket(make_ticket(max_quantity=1, sold_quantity=1))

        with pytest.raises(InsufficientInventoryError):
            service.start_checkout(checkout_request(ticket))

        assert store.orders == {}
        assert gateway.requests == []

    def test_inactive_ticket_creates_no_order(self, service, store):
        ticket = store.add_ticket(make_ticket(is_active=False))

        with pytest.raises(TicketUnavailableError):
            service.start_checkout(checkout_request(ticket))

        assert store.orders == {}

    def test_ticket_of_another_event_is_not_found(self, service, store):
        ticket = store.add_ticket(make_ticket())
        request = replace(checkout_request(ticket), event_id=str(uuid4()))

        with pytest.raises(TicketNotFoundError):
            service.start_checkout(request)

    def test_invalid_ticket_id(self, service, store):
        ticket = store.add_ticket(make_ticket())
        request = replace(checkout_request(ticket), ticket_id="abc")

        with pytest.raises(InvalidIdentifierError):
            service.start_checkout(request)

    def test_gateway_failure_keeps_pending_order_without_session(self, store):
        service = CheckoutService(store, FakePaymentGateway(fail=True), clock=lambda: NOW)
        ticket = store.add_ticket(make_ticket())

        with pytest.raises(GatewayUnavailableError) as exc_info:
            service.start_checkout(checkout_request(ticket))

        [order] = store.orders.values()
        assert order.status is OrderStatus.PENDING
        assert order.checkout_session_id is None
        assert exc_info.value.order_id == str(order.id)
        assert str(order.id) not in exc_info.value.message

    def test_order_expired_during_gateway_call_gets_no_session(self, store):
        """An order cancelled while its session was being created never becomes payable."""

        class ExpiringGateway(FakePaymentGateway):
            def create_checkout_session(self, request):
                store.transition_order(
                    request.correlation.order_id, OrderStatus.CANCELLED, failure_reason="expired"
                )
                return super().create_checkout_session(request)

        service = CheckoutService(store, ExpiringGateway(), clock=lambda: NOW)
        ticket = store.add_ticket(make_ticket())

        with pytest.raises(GatewayUnavailableError):
            service.start_checkout(checkout_request(ticket))

        [order] = store.orders.values()
        assert order.status is OrderStatus.CANCELLED
        assert order.checkout_session_id is None


class TestOrderService:
    """Tests for OrderService."""

    def _paid_order(self, store, gateway):
        ticket = store.add_ticket(make_ticket())
        result = CheckoutService(store, gateway, clock=lambda: NOW).start_checkout(
            checkout_request(ticket)
        )
        store.transition_order(result.order_id, OrderStatus.PAID, confirmation_id="pi_1")
        return store.orders[result.order_id]

    def test_set_validated_on_paid_order(self, store, gateway):
        order = self._paid_order(store, gateway)

        updated = OrderService(store).set_validated(str(order.event_id), str(order.id), True)

        assert updated.validated is True

    def test_set_validated_rejects_unpaid_order(self, store, gateway):
        ticket = store.add_ticket(make_ticket())
        result = CheckoutService(store, gateway).start_checkout(checkout_request(ticket))

        with pytest.raises(OrderNotPaidError):
            OrderService(store).set_validated(str(ticket.event_id), str(result.order_id), True)

    def test_set_validated_for_wrong_event(self, store, gateway):
        order = self._paid_order(store, gateway)

        with pytest.raises(OrderNotFoundError):
            OrderService(store).set_validated(str(uuid4()), str(order.id), True)

    def test_list_orders_invalid_event_id(self, store):
        with pytest.raises(InvalidIdentifierError):
            OrderService(store).list_orders_for_event("nope")

    def test_expire_stale_pending_cancels_only_sessionless_orders(self, store):
        ticket = store.add_ticket(make_ticket())
        stale = CheckoutService(store, FakePaymentGateway(fail=True))
        with pytest.raises(GatewayUnavailableError):
            stale.start_checkout(checkout_request(ticket))
        live = CheckoutService(store, FakePaymentGateway()).start_checkout(checkout_request(ticket))

        later = datetime.now(timezone.utc) + timedelta(hours=2)
        expired = OrderService(store).expire_stale_pending(timedelta(minutes=60), later)

        assert len(expired) == 1
        assert store.orders[expired[0]].status is OrderStatus.CANCELLED
        assert store.orders[expired[0]].failure_reason == "expired"
        assert store.orders[live.order_id].status is OrderStatus.PENDING
