"""Checkout session orchestration.

Flow: look up and admit the ticket, price it, persist a pending order, then
ask the gateway for a hosted payment session carrying the order correlation.
The order is committed before the gateway call, so a gateway failure leaves
an inert pending order without a session id rather than losing the attempt.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from django.utils import timezone

from ticketing.domain import EventId, NewOrder, OrderId, Quantity, TicketId
from ticketing.domain.admission import admit
from ticketing.domain.correlation import Correlation
from ticketing.domain.errors import GatewayUnavailableError
from ticketing.domain.pricing import quote_price
from ticketing.gateways.interfaces import CheckoutSessionRequest, GatewayError, PaymentGateway
from ticketing.services.catalog_service import CatalogService, parse_uuid
from ticketing.stores.interfaces import TicketingStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckoutRequest:
    event_id: str
    ticket_id: str
    quantity: int
    buyer_email: str
    success_url: str
    cancel_url: str
    discount_code: str | None = None
    buyer_id: str | None = None


@dataclass(frozen=True)
class CheckoutResult:
    order_id: OrderId
    checkout_url: str
    session_id: str


class CheckoutService:
    """Service that turns a purchase request into a payment session."""

    def __init__(
        self,
        store: TicketingStore,
        gateway: PaymentGateway,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._catalog = CatalogService(store)
        self._clock = clock

    def start_checkout(self, request: CheckoutRequest) -> CheckoutResult:
        """Create a pending order and a gateway session for it.

        Raises:
            InvalidIdentifierError: If event_id or ticket_id is not a valid UUID.
            TicketNotFoundError: If the ticket does not belong to the event.
            TicketUnavailableError: If the ticket is inactive.
            InsufficientInventoryError: If not enough tickets are left.
            GatewayUnavailableError: If the gateway failed (the pending order is kept)
                or the order was expired before its session could be attached.
        """
        event_id = EventId(parse_uuid(request.event_id, "event ID"))
        ticket_id = TicketId(parse_uuid(request.ticket_id, "ticket ID"))
        quantity = Quantity(request.quantity)

        ticket = self._catalog.get_ticket(event_id, ticket_id)
        admit(ticket, quantity)

        # Unknown or unusable codes price as no discount.
        code = self._catalog.find_discount_code(event_id, request.discount_code)
        quote = quote_price(ticket.price, quantity, code, self._clock())

        order = self._store.create_order(
            NewOrder(
                event_id=event_id,
                ticket_id=ticket_id,
                buyer_id=request.buyer_id,
                buyer_email=request.buyer_email,
                quantity=quantity.value,
                unit_price=quote.unit_price,
                discount_amount=quote.discount_amount,
                total_amount=quote.total_amount,
                discount_code_id=quote.applied_code.id if quote.applied_code else None,
            )
        )
        logger.info(
            "Pending order created",
            extra={
                "order_id": str(order.id),
                "ticket_id": str(ticket_id),
                "quantity": quantity.value,
                "total_amount": str(quote.total_amount),
                "discounted": quote.applied_code is not None,
            },
        )

        correlation = Correlation(
            order_id=order.id,
            ticket_id=ticket_id,
            event_id=event_id,
            buyer_id=request.buyer_id,
        )
        try:
            session = self._gateway.create_checkout_session(
                CheckoutSessionRequest(
                    correlation=correlation,
                    item_name=ticket.name,
                    unit_amount=quote.effective_unit_price,
                    quantity=quantity.value,
                    buyer_email=request.buyer_email,
                    success_url=request.success_url,
                    cancel_url=request.cancel_url,
                )
            )
        except GatewayError as exc:
            logger.exception(
                "Payment gateway refused checkout session",
                extra={"order_id": str(order.id)},
            )
            raise GatewayUnavailableError(str(order.id)) from exc

        if not self._store.attach_checkout_session(order.id, session.session_id):
            # Expired while the gateway call was in flight; the session is never handed out.
            logger.warning(
                "Order left pending before its checkout session was attached",
                extra={"order_id": str(order.id), "session_id": session.session_id},
            )
            raise GatewayUnavailableError(str(order.id))
        return CheckoutResult(
            order_id=order.id,
            checkout_url=session.url,
            session_id=session.session_id,
        )
