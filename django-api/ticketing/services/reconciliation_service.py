"""Payment event reconciliation.

Events arrive at least once, in any order, possibly for orders that are
already settled. The terminal-state check, the order write and the counter
updates all happen inside one store transaction with the order row locked,
and the order write itself is conditional on the order still being pending.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from ticketing.domain import Order, OrderId, OrderStatus
from ticketing.domain.errors import CorrelationMissingError, OrderNotFoundError
from ticketing.domain.payment_events import (
    PaymentCancelled,
    PaymentCompleted,
    PaymentEvent,
    PaymentFailed,
    UnrecognizedPaymentEvent,
)
from ticketing.gateways.interfaces import PaymentGateway
from ticketing.stores.interfaces import TicketingStore

logger = logging.getLogger(__name__)

SOLD_OUT_REASON = "sold_out"


class ReconciliationOutcome(Enum):
    PAID = "paid"
    FAILED = "failed"
    CANCELLED = "cancelled"
    SOLD_OUT = "sold_out"
    ALREADY_TERMINAL = "already_terminal"
    IGNORED = "ignored"
    CORRELATION_MISSING = "correlation_missing"
    ORDER_NOT_FOUND = "order_not_found"


@dataclass(frozen=True)
class ReconciliationResult:
    outcome: ReconciliationOutcome
    order_id: OrderId | None = None


class _TransitionLost(Exception):
    """The order left pending between lock and write; roll back and report."""


class ReconciliationService:
    """Service that settles orders from payment gateway events."""

    def __init__(self, store: TicketingStore, gateway: PaymentGateway) -> None:
        self._store = store
        self._gateway = gateway

    def handle_envelope(self, envelope: Mapping[str, Any]) -> ReconciliationResult:
        """Reconcile a raw gateway envelope.

        Never raises for malformed or foreign events: those are logged and
        reported through the result so the transport can acknowledge them.
        """
        try:
            event = self._gateway.parse_event(envelope)
            return self.reconcile(event)
        except CorrelationMissingError as exc:
            logger.error(
                "Payment event without usable order correlation",
                extra={"detail": getattr(exc, "detail", "")},
            )
            return ReconciliationResult(ReconciliationOutcome.CORRELATION_MISSING)
        except OrderNotFoundError as exc:
            logger.warning(
                "Payment event for unknown order",
                extra={"order_id": getattr(exc, "order_id", "")},
            )
            return ReconciliationResult(ReconciliationOutcome.ORDER_NOT_FOUND)

    def reconcile(self, event: PaymentEvent) -> ReconciliationResult:
        """Apply one payment event.

        Raises:
            CorrelationMissingError: If the correlation does not match the order.
            OrderNotFoundError: If the correlated order does not exist.
        """
        if isinstance(event, UnrecognizedPaymentEvent):
            logger.info(
                "Ignoring payment event",
                extra={"event_id": event.event_id, "event_type": event.event_type},
            )
            return ReconciliationResult(ReconciliationOutcome.IGNORED)
        if isinstance(event, PaymentCompleted):
            return self._complete(event)
        if isinstance(event, PaymentFailed):
            return self._close(event, OrderStatus.FAILED, ReconciliationOutcome.FAILED)
        if isinstance(event, PaymentCancelled):
            return self._close(event, OrderStatus.CANCELLED, ReconciliationOutcome.CANCELLED)
        raise TypeError(f"Unsupported payment event {type(event).__name__}")

    def _lock_pending(self, event: PaymentCompleted | PaymentFailed | PaymentCancelled) -> Order:
        order_id = event.correlation.order_id
        order = self._store.lock_order(order_id)
        if order is None:
            raise OrderNotFoundError(str(order_id))
        if order.ticket_id != event.correlation.ticket_id:
            raise CorrelationMissingError("correlation ticket does not match order")
        return order

    def _already_terminal(self, order: Order, event_id: str) -> ReconciliationResult:
        logger.info(
            "Order already settled, skipping redelivered event",
            extra={
                "order_id": str(order.id),
                "status": order.status.value,
                "event_id": event_id,
            },
        )
        return ReconciliationResult(ReconciliationOutcome.ALREADY_TERMINAL, order.id)

    def _complete(self, event: PaymentCompleted) -> ReconciliationResult:
        try:
            with self._store.atomic():
                order = self._lock_pending(event)
                if order.status.is_terminal:
                    return self._already_terminal(order, event.event_id)

                if not self._store.try_increment_sold(order.ticket_id, order.quantity):
                    if not self._store.transition_order(
                        order.id, OrderStatus.FAILED, failure_reason=SOLD_OUT_REASON
                    ):
                        raise _TransitionLost
                    logger.warning(
                        "Payment confirmed for sold out ticket, order failed",
                        extra={
                            "order_id": str(order.id),
                            "ticket_id": str(order.ticket_id),
                            "confirmation_id": event.confirmation_id,
                        },
                    )
                    return ReconciliationResult(ReconciliationOutcome.SOLD_OUT, order.id)

                if not self._store.transition_order(
                    order.id, OrderStatus.PAID, confirmation_id=event.confirmation_id
                ):
                    raise _TransitionLost

                if order.discount_code_id and not self._store.try_increment_discount_usage(
                    order.discount_code_id
                ):
                    logger.warning(
                        "Discount code exhausted before payment confirmation",
                        extra={
                            "order_id": str(order.id),
                            "discount_code_id": str(order.discount_code_id),
                        },
                    )
        except _TransitionLost:
            logger.info(
                "Order settled concurrently, skipping event",
                extra={"order_id": str(event.correlation.order_id), "event_id": event.event_id},
            )
            return ReconciliationResult(
                ReconciliationOutcome.ALREADY_TERMINAL, event.correlation.order_id
            )

        if event.amount_total is not None and event.amount_total != order.total_amount.minor_units:
            logger.error(
                "Gateway amount differs from captured order total",
                extra={
                    "order_id": str(order.id),
                    "gateway_amount": event.amount_total,
                    "order_amount": order.total_amount.minor_units,
                },
            )
        logger.info(
            "Order paid",
            extra={"order_id": str(order.id), "confirmation_id": event.confirmation_id},
        )
        return ReconciliationResult(ReconciliationOutcome.PAID, order.id)

    def _close(
        self,
        event: PaymentFailed | PaymentCancelled,
        status: OrderStatus,
        outcome: ReconciliationOutcome,
    ) -> ReconciliationResult:
        with self._store.atomic():
            order = self._lock_pending(event)
            if order.status.is_terminal or not self._store.transition_order(order.id, status):
                return self._already_terminal(order, event.event_id)
        logger.info(
            "Order closed without payment",
            extra={"order_id": str(order.id), "status": status.value},
        )
        return ReconciliationResult(outcome, order.id)
