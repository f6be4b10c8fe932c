"""Domain error codes for the ticketing module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    TICKET_NOT_FOUND = "TICKET_NOT_FOUND"
    TICKET_UNAVAILABLE = "TICKET_UNAVAILABLE"
    INSUFFICIENT_INVENTORY = "INSUFFICIENT_INVENTORY"
    GATEWAY_UNAVAILABLE = "GATEWAY_UNAVAILABLE"
    CORRELATION_MISSING = "CORRELATION_MISSING"
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    ORDER_NOT_PAID = "ORDER_NOT_PAID"
    INVALID_ID = "INVALID_ID"
    VALIDATION_ERROR = "VALIDATION_ERROR"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class TicketNotFoundError(DomainError):
    """Raised when a ticket does not exist for the given event."""

    def __init__(self, ticket_id: str) -> None:
        super().__init__(
            code=ErrorCode.TICKET_NOT_FOUND,
            message="Ticket not found",
        )
        object.__setattr__(self, "ticket_id", ticket_id)


class TicketUnavailableError(DomainError):
    """Raised when a ticket is not on sale."""

    def __init__(self, ticket_id: str) -> None:
        super().__init__(
            code=ErrorCode.TICKET_UNAVAILABLE,
            message="Ticket is not available for purchase",
        )
        object.__setattr__(self, "ticket_id", ticket_id)


class InsufficientInventoryError(DomainError):
    """Raised when the requested quantity exceeds what is left."""

    def __init__(self, ticket_id: str, remaining: int) -> None:
        super().__init__(
            code=ErrorCode.INSUFFICIENT_INVENTORY,
            message=f"Only {remaining} tickets available",
        )
        object.__setattr__(self, "ticket_id", ticket_id)
        object.__setattr__(self, "remaining", remaining)


class GatewayUnavailableError(DomainError):
    """Raised when the payment gateway could not create a session.

    The pending order is kept, so the caller may retry.
    """

    def __init__(self, order_id: str | None = None) -> None:
        super().__init__(
            code=ErrorCode.GATEWAY_UNAVAILABLE,
            message="Payment provider is unavailable, please try again",
        )
        object.__setattr__(self, "order_id", order_id)


class CorrelationMissingError(DomainError):
    """Raised when a payment event carries no usable correlation payload."""

    def __init__(self, detail: str) -> None:
        super().__init__(
            code=ErrorCode.CORRELATION_MISSING,
            message="Payment event has no order correlation",
        )
        object.__setattr__(self, "detail", detail)


class OrderNotFoundError(DomainError):
    """Raised when an order does not exist."""

    def __init__(self, order_id: str) -> None:
        super().__init__(
            code=ErrorCode.ORDER_NOT_FOUND,
            message="Order not found",
        )
        object.__setattr__(self, "order_id", order_id)


class OrderNotPaidError(DomainError):
    """Raised when a check-in is attempted on an unpaid order."""

    def __init__(self, order_id: str) -> None:
        super().__init__(
            code=ErrorCode.ORDER_NOT_PAID,
            message="Only paid orders can be validated",
        )
        object.__setattr__(self, "order_id", order_id)


class InvalidIdentifierError(DomainError):
    """Raised when an identifier is not a valid UUID."""

    def __init__(self, field: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_ID,
            message=f"Invalid {field} format",
        )
