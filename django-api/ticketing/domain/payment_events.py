"""Closed set of payment events the reconciler understands.

Gateway adapters translate their own envelopes into one of these variants at
the boundary. Anything they cannot map becomes UnrecognizedPaymentEvent.
"""

from dataclasses import dataclass

from ticketing.domain.correlation import Correlation


@dataclass(frozen=True)
class PaymentCompleted:
    event_id: str
    correlation: Correlation
    confirmation_id: str
    amount_total: int | None = None


@dataclass(frozen=True)
class PaymentFailed:
    event_id: str
    correlation: Correlation


@dataclass(frozen=True)
class PaymentCancelled:
    event_id: str
    correlation: Correlation


@dataclass(frozen=True)
class UnrecognizedPaymentEvent:
    event_id: str
    event_type: str


PaymentEvent = PaymentCompleted | PaymentFailed | PaymentCancelled | UnrecognizedPaymentEvent
