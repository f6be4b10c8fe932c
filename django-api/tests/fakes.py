"""In-memory test doubles for the store and the payment gateway."""

import json
import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

from ticketing.domain import (
    DiscountCode,
    DiscountCodeId,
    DiscountKind,
    EventId,
    Money,
    NewOrder,
    Order,
    OrderId,
    OrderStatus,
    Ticket,
    TicketId,
)
from ticketing.gateways.interfaces import (
    CheckoutSession,
    GatewayError,
    PaymentGateway,
    WebhookVerificationError,
)
from ticketing.gateways.stripe_gateway import StripeGateway
from ticketing.stores.interfaces import TicketingStore

VALID_SIGNATURE = "t=1,v1=valid"


def make_ticket(
    event_id: EventId | None = None,
    price: str = "20.00",
    max_quantity: int | None = None,
    sold_quantity: int = 0,
    is_active: bool = True,
) -> Ticket:
    return Ticket(
        id=TicketId(uuid4()),
        event_id=event_id or EventId(uuid4()),
        name="General admission",
        price=Money(Decimal(price)),
        max_quantity=max_quantity,
        sold_quantity=sold_quantity,
        is_active=is_active,
    )


def make_code(
    event_id: EventId,
    code: str = "HALF",
    kind: DiscountKind = DiscountKind.PERCENTAGE,
    value: str = "50",
    max_uses: int | None = None,
    used_count: int = 0,
    valid_from: datetime | None = None,
    valid_until: datetime | None = None,
    is_active: bool = True,
) -> DiscountCode:
    return DiscountCode(
        id=DiscountCodeId(uuid4()),
        event_id=event_id,
        code=code.upper(),
        kind=kind,
        value=Decimal(value),
        max_uses=max_uses,
        used_count=used_count,
        valid_from=valid_from,
        valid_until=valid_until,
        is_active=is_active,
    )


def stripe_event(
    event_type: str,
    metadata: dict | None,
    event_id: str = "evt_1",
    **session_fields,
) -> dict:
    session = {"id": "cs_test_1", "object": "checkout.session", **session_fields}
    if metadata is not None:
        session["metadata"] = metadata
    return {"id": event_id, "object": "event", "type": event_type, "data": {"object": session}}


def completed_event(metadata: dict | None, event_id: str = "evt_1", **session_fields) -> dict:
    session_fields.setdefault("payment_status", "paid")
    session_fields.setdefault("payment_intent", "pi_test_1")
    return stripe_event("checkout.session.completed", metadata, event_id, **session_fields)


class InMemoryTicketingStore(TicketingStore):
    """Dict-backed store. atomic() serializes callers and rolls back on error."""

    def __init__(self) -> None:
        self.tickets: dict[TicketId, Ticket] = {}
        self.codes: dict[DiscountCodeId, DiscountCode] = {}
        self.orders: dict[OrderId, Order] = {}
        self._lock = threading.RLock()

    def add_ticket(self, ticket: Ticket) -> Ticket:
        self.tickets[ticket.id] = ticket
        return ticket

    def add_code(self, code: DiscountCode) -> DiscountCode:
        self.codes[code.id] = code
        return code

    @contextmanager
    def atomic(self):
        with self._lock:
            snapshot = (dict(self.tickets), dict(self.codes), dict(self.orders))
            try:
                yield
            except BaseException:
                self.tickets, self.codes, self.orders = snapshot
                raise

    def get_ticket(self, event_id, ticket_id):
        ticket = self.tickets.get(ticket_id)
        if ticket is None or ticket.event_id != event_id:
            return None
        return ticket

    def find_discount_code(self, event_id, code):
        for candidate in self.codes.values():
            if candidate.event_id == event_id and candidate.code.lower() == code.strip().lower():
                return candidate
        return None

    def create_order(self, new_order: NewOrder) -> Order:
        now = datetime.now(timezone.utc)
        order = Order(
            id=OrderId(uuid4()),
            event_id=new_order.event_id,
            ticket_id=new_order.ticket_id,
            buyer_id=new_order.buyer_id,
            buyer_email=new_order.buyer_email,
            quantity=new_order.quantity,
            unit_price=new_order.unit_price,
            discount_amount=new_order.discount_amount,
            total_amount=new_order.total_amount,
            discount_code_id=new_order.discount_code_id,
            status=OrderStatus.PENDING,
            checkout_session_id=None,
            confirmation_id=None,
            failure_reason="",
            validated=False,
            created_at=now,
            updated_at=now,
        )
        self.orders[order.id] = order
        return order

    def attach_checkout_session(self, order_id, session_id):
        order = self.orders.get(order_id)
        if order is None or order.status is not OrderStatus.PENDING:
            return False
        self.orders[order_id] = replace(order, checkout_session_id=session_id)
        return True

    def get_order(self, order_id):
        return self.orders.get(order_id)

    def lock_order(self, order_id):
        return self.orders.get(order_id)

    def transition_order(self, order_id, status, confirmation_id=None, failure_reason=""):
        order = self.orders.get(order_id)
        if order is None or order.status is not OrderStatus.PENDING:
            return False
        self.orders[order_id] = replace(
            order,
            status=status,
            confirmation_id=confirmation_id,
            failure_reason=failure_reason,
        )
        return True

    def try_increment_sold(self, ticket_id, quantity):
        ticket = self.tickets.get(ticket_id)
        if ticket is None:
            return False
        if ticket.max_quantity is not None and ticket.sold_quantity + quantity > ticket.max_quantity:
            return False
        self.tickets[ticket_id] = replace(ticket, sold_quantity=ticket.sold_quantity + quantity)
        return True

    def try_increment_discount_usage(self, code_id):
        code = self.codes.get(code_id)
        if code is None:
            return False
        if code.max_uses is not None and code.used_count >= code.max_uses:
            return False
        self.codes[code_id] = replace(code, used_count=code.used_count + 1)
        return True

    def list_orders_for_event(self, event_id):
        orders = [o for o in self.orders.values() if o.event_id == event_id]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def set_order_validated(self, order_id, validated):
        self.orders[order_id] = replace(self.orders[order_id], validated=validated)

    def stale_pending_orders(self, created_before):
        return [
            o
            for o in self.orders.values()
            if o.status is OrderStatus.PENDING
            and o.checkout_session_id is None
            and o.created_at < created_before
        ]


class FakePaymentGateway(PaymentGateway):
    """Records session requests; parses events with the real Stripe mapping."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.requests = []
        self._stripe = StripeGateway(api_key="sk_test", webhook_secret="whsec_test")

    def create_checkout_session(self, request):
        if self.fail:
            raise GatewayError("connection timed out")
        self.requests.append(request)
        number = len(self.requests)
        return CheckoutSession(
            session_id=f"cs_test_{number}",
            url=f"https://checkout.stripe.test/pay/cs_test_{number}",
        )

    def verify_webhook(self, payload, signature):
        if signature != VALID_SIGNATURE:
            raise WebhookVerificationError("Invalid signature")
        return json.loads(payload)

    def parse_event(self, envelope):
        return self._stripe.parse_event(envelope)
