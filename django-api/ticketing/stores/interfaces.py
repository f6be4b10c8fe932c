"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime

from ticketing.domain import (
    DiscountCode,
    DiscountCodeId,
    EventId,
    NewOrder,
    Order,
    OrderId,
    OrderStatus,
    Ticket,
    TicketId,
)


class TicketingStore(ABC):
    """Interface for ticket, discount code and order persistence."""

    @abstractmethod
    def atomic(self) -> AbstractContextManager:
        """Return a transaction scope; everything inside commits or rolls back together."""
        ...

    @abstractmethod
    def get_ticket(self, event_id: EventId, ticket_id: TicketId) -> Ticket | None:
        """Return a ticket belonging to the event, or None if not found."""
        ...

    @abstractmethod
    def find_discount_code(self, event_id: EventId, code: str) -> DiscountCode | None:
        """Return the event's discount code matching `code` case-insensitively."""
        ...

    @abstractmethod
    def create_order(self, new_order: NewOrder) -> Order:
        """Persist a pending order and return it."""
        ...

    @abstractmethod
    def attach_checkout_session(self, order_id: OrderId, session_id: str) -> bool:
        """Record the gateway session id on a pending order.

        Returns False if the order is no longer pending.
        """
        ...

    @abstractmethod
    def get_order(self, order_id: OrderId) -> Order | None:
        """Return an order by ID, or None if not found."""
        ...

    @abstractmethod
    def lock_order(self, order_id: OrderId) -> Order | None:
        """Return an order, holding a row lock until the enclosing transaction ends."""
        ...

    @abstractmethod
    def transition_order(
        self,
        order_id: OrderId,
        status: OrderStatus,
        confirmation_id: str | None = None,
        failure_reason: str = "",
    ) -> bool:
        """Move a pending order to a terminal status.

        Returns False if the order was no longer pending.
        """
        ...

    @abstractmethod
    def try_increment_sold(self, ticket_id: TicketId, quantity: int) -> bool:
        """Add to sold_quantity unless that would exceed max_quantity.

        Returns whether the increment was applied.
        """
        ...

    @abstractmethod
    def try_increment_discount_usage(self, code_id: DiscountCodeId) -> bool:
        """Add one use unless the code is exhausted. Returns whether it applied."""
        ...

    @abstractmethod
    def list_orders_for_event(self, event_id: EventId) -> list[Order]:
        """Return all orders for an event, ordered by created_at descending."""
        ...

    @abstractmethod
    def set_order_validated(self, order_id: OrderId, validated: bool) -> None:
        """Set the door check-in flag on an order."""
        ...

    @abstractmethod
    def stale_pending_orders(self, created_before: datetime) -> list[Order]:
        """Return pending orders without a session id created before the cutoff."""
        ...
