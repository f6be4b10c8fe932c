"""Payment gateway interface.

The gateway is the only outbound dependency of the checkout flow. It also
owns the translation of its own event envelopes into domain payment events.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Mapping

from ticketing.domain.correlation import Correlation
from ticketing.domain.payment_events import PaymentEvent
from ticketing.domain.value_objects import Money


class GatewayError(Exception):
    """The gateway was unreachable or rejected the request."""


class WebhookVerificationError(Exception):
    """An inbound webhook payload failed signature or format checks."""


@dataclass(frozen=True)
class CheckoutSessionRequest:
    correlation: Correlation
    item_name: str
    unit_amount: Money
    quantity: int
    buyer_email: str
    success_url: str
    cancel_url: str


@dataclass(frozen=True)
class CheckoutSession:
    session_id: str
    url: str


class PaymentGateway(ABC):
    """Interface for the hosted payment provider."""

    @abstractmethod
    def create_checkout_session(self, request: CheckoutSessionRequest) -> CheckoutSession:
        """Create a redirectable payment session.

        Raises:
            GatewayError: If the provider cannot be reached or refuses the session.
        """
        ...

    @abstractmethod
    def verify_webhook(self, payload: bytes, signature: str) -> dict[str, Any]:
        """Check a webhook signature and return the decoded envelope.

        Raises:
            WebhookVerificationError: If the signature or body is invalid.
        """
        ...

    @abstractmethod
    def parse_event(self, envelope: Mapping[str, Any]) -> PaymentEvent:
        """Translate a provider envelope into a domain payment event.

        Raises:
            CorrelationMissingError: If a handled event carries no usable correlation.
        """
        ...
