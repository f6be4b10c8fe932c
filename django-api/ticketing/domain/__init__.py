from ticketing.domain.models import (
    DiscountCode,
    DiscountKind,
    NewOrder,
    Order,
    OrderStatus,
    Ticket,
)
from ticketing.domain.value_objects import (
    DiscountCodeId,
    EventId,
    Money,
    OrderId,
    Quantity,
    TicketId,
)

__all__ = [
    "Ticket",
    "DiscountCode",
    "DiscountKind",
    "Order",
    "NewOrder",
    "OrderStatus",
    "EventId",
    "TicketId",
    "DiscountCodeId",
    "OrderId",
    "Money",
    "Quantity",
]
