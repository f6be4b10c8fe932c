"""Stripe Checkout implementation of the PaymentGateway.

Events reach us two ways: signed webhooks posted straight by Stripe, and
event-bus deliveries wrapping the Stripe event as
``{"source": "stripe.com", "detail-type": ..., "detail": <event>}``.
Both are unwrapped to the same Stripe event shape before mapping.
"""

from typing import Any, Mapping

import stripe
from django.conf import settings

from ticketing.domain.correlation import Correlation
from ticketing.domain.errors import CorrelationMissingError
from ticketing.domain.payment_events import (
    PaymentCancelled,
    PaymentCompleted,
    PaymentEvent,
    PaymentFailed,
    UnrecognizedPaymentEvent,
)
from ticketing.gateways.interfaces import (
    CheckoutSession,
    CheckoutSessionRequest,
    GatewayError,
    PaymentGateway,
    WebhookVerificationError,
)

SESSION_COMPLETED = "checkout.session.completed"
ASYNC_PAYMENT_SUCCEEDED = "checkout.session.async_payment_succeeded"
ASYNC_PAYMENT_FAILED = "checkout.session.async_payment_failed"
SESSION_EXPIRED = "checkout.session.expired"

HANDLED_EVENT_TYPES = {
    SESSION_COMPLETED,
    ASYNC_PAYMENT_SUCCEEDED,
    ASYNC_PAYMENT_FAILED,
    SESSION_EXPIRED,
}
OUTSTANDING_PAYMENT_STATUS = "unpaid"


def unwrap_envelope(envelope: Mapping[str, Any]) -> Mapping[str, Any]:
    """Return the Stripe event inside an event-bus envelope, or the envelope itself."""
    detail = envelope.get("detail")
    if isinstance(detail, Mapping):
        return detail
    return envelope


class StripeGateway(PaymentGateway):
    """Hosted Stripe Checkout sessions."""

    def __init__(
        self,
        api_key: str,
        webhook_secret: str,
        currency: str = "eur",
        timeout: float = 10.0,
        client: stripe.StripeClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._webhook_secret = webhook_secret
        self._currency = currency
        self._timeout = timeout
        self._client = client

    @classmethod
    def from_settings(cls) -> "StripeGateway":
        return cls(
            api_key=settings.STRIPE_SECRET_KEY,
            webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
            currency=settings.TICKETING_CURRENCY,
            timeout=settings.STRIPE_TIMEOUT_SECONDS,
        )

    @property
    def client(self) -> stripe.StripeClient:
        if self._client is None:
            self._client = stripe.StripeClient(
                self._api_key,
                http_client=stripe.RequestsClient(timeout=self._timeout),
                max_network_retries=0,
            )
        return self._client

    def create_checkout_session(self, request: CheckoutSessionRequest) -> CheckoutSession:
        metadata = request.correlation.to_metadata()
        params = {
            "mode": "payment",
            "payment_method_types": ["card"],
            "line_items": [
                {
                    "price_data": {
                        "currency": self._currency,
                        "product_data": {"name": request.item_name},
                        "unit_amount": request.unit_amount.minor_units,
                    },
                    "quantity": request.quantity,
                }
            ],
            "customer_email": request.buyer_email,
            "success_url": request.success_url,
            "cancel_url": request.cancel_url,
            "client_reference_id": metadata["order_id"],
            "metadata": metadata,
            "payment_intent_data": {"metadata": metadata},
        }
        try:
            session = self.client.checkout.sessions.create(params=params)
        except stripe.StripeError as exc:
            raise GatewayError(str(exc)) from exc
        if not session.id or not session.url:
            raise GatewayError("Stripe returned a session without id or url")
        return CheckoutSession(session_id=session.id, url=session.url)

    def verify_webhook(self, payload: bytes, signature: str) -> dict[str, Any]:
        if not self._webhook_secret:
            raise WebhookVerificationError("Webhook secret not configured")
        if not signature:
            raise WebhookVerificationError("Missing Stripe-Signature header")
        # Signature and timestamp are checked before the body is decoded.
        try:
            event = stripe.Webhook.construct_event(
                payload=payload, sig_header=signature, secret=self._webhook_secret
            )
        except stripe.SignatureVerificationError as exc:
            raise WebhookVerificationError("Invalid signature") from exc
        except ValueError as exc:
            raise WebhookVerificationError("Invalid payload") from exc
        except (AttributeError, TypeError) as exc:
            # Signed JSON that is not an object cannot become a stripe.Event.
            raise WebhookVerificationError("Invalid payload") from exc
        if not isinstance(event, Mapping):
            raise WebhookVerificationError("Invalid payload")
        return dict(event)

    def parse_event(self, envelope: Mapping[str, Any]) -> PaymentEvent:
        if not isinstance(envelope, Mapping):
            raise CorrelationMissingError("envelope is not an object")
        event = unwrap_envelope(envelope)
        event_type = str(event.get("type") or envelope.get("detail-type") or "")
        event_id = str(event.get("id") or envelope.get("id") or "")

        if event_type not in HANDLED_EVENT_TYPES:
            return UnrecognizedPaymentEvent(event_id=event_id, event_type=event_type)

        data = event.get("data")
        session = data.get("object") if isinstance(data, Mapping) else None
        if not isinstance(session, Mapping):
            raise CorrelationMissingError("event has no data.object")
        correlation = Correlation.from_metadata(session.get("metadata"))

        if event_type == SESSION_EXPIRED:
            return PaymentCancelled(event_id=event_id, correlation=correlation)
        if event_type == ASYNC_PAYMENT_FAILED:
            return PaymentFailed(event_id=event_id, correlation=correlation)

        payment_status = session.get("payment_status")
        if event_type == SESSION_COMPLETED and payment_status == OUTSTANDING_PAYMENT_STATUS:
            # Delayed payment methods complete the session before the money arrives.
            return UnrecognizedPaymentEvent(
                event_id=event_id, event_type=f"{event_type}:{payment_status}"
            )

        payment_intent = session.get("payment_intent")
        if isinstance(payment_intent, Mapping):
            payment_intent = payment_intent.get("id")
        amount_total = session.get("amount_total")
        return PaymentCompleted(
            event_id=event_id,
            correlation=correlation,
            confirmation_id=str(payment_intent or session.get("id") or event_id),
            amount_total=amount_total if isinstance(amount_total, int) else None,
        )
