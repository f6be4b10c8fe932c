"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in ticketing/models.py (persistence layer).
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from ticketing.domain.value_objects import (
    DiscountCodeId,
    EventId,
    Money,
    OrderId,
    TicketId,
)


class DiscountKind(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class OrderStatus(Enum):
    """Order state machine. Every status except PENDING is terminal."""

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not OrderStatus.PENDING


@dataclass(frozen=True)
class Ticket:
    """Domain representation of a Ticket."""

    id: TicketId
    event_id: EventId
    name: str
    price: Money
    max_quantity: int | None
    sold_quantity: int
    is_active: bool

    @property
    def remaining(self) -> int | None:
        if self.max_quantity is None:
            return None
        return max(0, self.max_quantity - self.sold_quantity)


@dataclass(frozen=True)
class DiscountCode:
    """Domain representation of a DiscountCode."""

    id: DiscountCodeId
    event_id: EventId
    code: str
    kind: DiscountKind
    value: Decimal
    max_uses: int | None
    used_count: int
    valid_from: datetime | None
    valid_until: datetime | None
    is_active: bool

    def is_redeemable(self, now: datetime) -> bool:
        """Active, inside its validity window and not yet exhausted."""
        if not self.is_active:
            return False
        if self.valid_from is not None and now < self.valid_from:
            return False
        if self.valid_until is not None and now > self.valid_until:
            return False
        if self.max_uses is not None and self.used_count >= self.max_uses:
            return False
        return True


@dataclass(frozen=True)
class Order:
    """Domain representation of an Order."""

    id: OrderId
    event_id: EventId
    ticket_id: TicketId
    buyer_id: str | None
    buyer_email: str
    quantity: int
    unit_price: Money
    discount_amount: Money
    total_amount: Money
    discount_code_id: DiscountCodeId | None
    status: OrderStatus
    checkout_session_id: str | None
    confirmation_id: str | None
    failure_reason: str
    validated: bool
    created_at: datetime
    updated_at: datetime
    ticket_name: str = ""


@dataclass(frozen=True)
class NewOrder:
    """Values captured at checkout, before the store assigns identity."""

    event_id: EventId
    ticket_id: TicketId
    buyer_id: str | None
    buyer_email: str
    quantity: int
    unit_price: Money
    discount_amount: Money
    total_amount: Money
    discount_code_id: DiscountCodeId | None
