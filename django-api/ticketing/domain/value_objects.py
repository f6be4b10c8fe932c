"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Self
from uuid import UUID

CENT = Decimal("0.01")


@dataclass(frozen=True)
class EventId:
    """Unique identifier for an Event."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class TicketId:
    """Unique identifier for a Ticket."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class DiscountCodeId:
    """Unique identifier for a DiscountCode."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class OrderId:
    """Unique identifier for an Order."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Money:
    """Non-negative amount in the configured currency, held to cents."""

    amount: Decimal

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")
        object.__setattr__(
            self, "amount", Decimal(self.amount).quantize(CENT, rounding=ROUND_HALF_UP)
        )

    @classmethod
    def zero(cls) -> Self:
        return cls(amount=Decimal("0"))

    @property
    def minor_units(self) -> int:
        """Amount in cents, as payment gateways expect it."""
        return int(self.amount * 100)

    def __mul__(self, quantity: int) -> "Money":
        return Money(self.amount * quantity)

    def __sub__(self, other: "Money") -> "Money":
        return Money(max(Decimal("0"), self.amount - other.amount))

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class Quantity:
    """Strictly positive number of tickets in one order."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 1:
            raise ValueError("Quantity must be at least 1")
