"""Ticket price computation.

Pure functions only: no I/O, no clock reads, no mutation of the discount
code. Usage counters are advanced by the reconciler when an order is paid.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from ticketing.domain.models import DiscountCode, DiscountKind
from ticketing.domain.value_objects import Money, Quantity


@dataclass(frozen=True)
class PriceQuote:
    """Result of pricing one order line."""

    unit_price: Money
    discount_per_unit: Money
    effective_unit_price: Money
    quantity: int
    total_amount: Money
    applied_code: DiscountCode | None = None

    @property
    def discount_amount(self) -> Money:
        """Discount actually granted over the whole order, after clamping."""
        return self.unit_price * self.quantity - self.total_amount


def discount_per_unit(unit_price: Money, code: DiscountCode) -> Money:
    if code.kind is DiscountKind.PERCENTAGE:
        return Money(unit_price.amount * code.value / Decimal(100))
    return Money(code.value)


def quote_price(
    unit_price: Money,
    quantity: Quantity,
    code: DiscountCode | None,
    now: datetime,
) -> PriceQuote:
    """Price `quantity` tickets at `unit_price`, applying `code` if redeemable at `now`."""
    applied = code if code is not None and code.is_redeemable(now) else None
    discount = discount_per_unit(unit_price, applied) if applied else Money.zero()
    effective = unit_price - discount
    return PriceQuote(
        unit_price=unit_price,
        discount_per_unit=discount,
        effective_unit_price=effective,
        quantity=quantity.value,
        total_amount=effective * quantity.value,
        applied_code=applied,
    )
