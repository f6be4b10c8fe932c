"""Order queries for event staff, check-in and pending order expiry."""

import logging
from datetime import datetime, timedelta

from ticketing.domain import EventId, Order, OrderId, OrderStatus
from ticketing.domain.errors import OrderNotFoundError, OrderNotPaidError
from ticketing.services.catalog_service import parse_uuid
from ticketing.stores.interfaces import TicketingStore

logger = logging.getLogger(__name__)

EXPIRED_REASON = "expired"


class OrderService:
    """Service for reading and administering orders of an event."""

    def __init__(self, store: TicketingStore) -> None:
        self._store = store

    def list_orders_for_event(self, event_id: str) -> list[Order]:
        """Return the event's orders, newest first.

        Raises:
            InvalidIdentifierError: If the event_id is not a valid UUID.
        """
        return self._store.list_orders_for_event(EventId(parse_uuid(event_id, "event ID")))

    def set_validated(self, event_id: str, order_id: str, validated: bool) -> Order:
        """Mark a paid order as checked in (or undo it).

        Raises:
            InvalidIdentifierError: If either ID is not a valid UUID.
            OrderNotFoundError: If the order does not exist for this event.
            OrderNotPaidError: If the order is not paid.
        """
        event = EventId(parse_uuid(event_id, "event ID"))
        oid = OrderId(parse_uuid(order_id, "order ID"))
        order = self._store.get_order(oid)
        if order is None or order.event_id != event:
            raise OrderNotFoundError(order_id)
        if order.status is not OrderStatus.PAID:
            raise OrderNotPaidError(order_id)
        self._store.set_order_validated(oid, validated)
        return self._store.get_order(oid)

    def expire_stale_pending(self, older_than: timedelta, now: datetime) -> list[OrderId]:
        """Cancel pending orders that never got a payment session.

        Uses the same pending-only write as the reconciler, so an order that
        settles meanwhile is left alone.
        """
        expired = []
        for order in self._store.stale_pending_orders(now - older_than):
            if self._store.transition_order(
                order.id, OrderStatus.CANCELLED, failure_reason=EXPIRED_REASON
            ):
                expired.append(order.id)
        if expired:
            logger.info("Expired stale pending orders", extra={"count": len(expired)})
        return expired
