"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

import logging

from django.apps import apps
from rest_framework import permissions, status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from ticketing.domain.errors import DomainError
from ticketing.gateways.interfaces import WebhookVerificationError
from ticketing.handlers.errors import error_response, validation_error_response
from ticketing.handlers.serializers import (
    CheckoutRequestSerializer,
    CheckoutResponseSerializer,
    OrderSerializer,
    OrderValidateSerializer,
)
from ticketing.services.checkout_service import CheckoutRequest

logger = logging.getLogger(__name__)


def _config():
    return apps.get_app_config("ticketing")


class CheckoutView(APIView):
    """Handler for POST /api/checkout"""

    permission_classes = [permissions.AllowAny]

    def post(self, request: Request) -> Response:
        serializer = CheckoutRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)
        data = serializer.validated_data
        buyer_id = str(request.user.pk) if request.user.is_authenticated else None

        try:
            result = _config().checkout_service.start_checkout(
                CheckoutRequest(
                    event_id=str(data["event_id"]),
                    ticket_id=str(data["ticket_id"]),
                    quantity=data["quantity"],
                    buyer_email=data["buyer_email"],
                    success_url=data["success_redirect_url"],
                    cancel_url=data["cancel_redirect_url"],
                    discount_code=data.get("discount_code"),
                    buyer_id=buyer_id,
                )
            )
        except DomainError as e:
            return error_response(e)

        return Response(
            CheckoutResponseSerializer(
                {"checkout_url": result.checkout_url, "session_id": result.session_id}
            ).data,
            status=status.HTTP_201_CREATED,
        )


class StripeWebhookView(APIView):
    """Handler for POST /api/webhooks/stripe

    Verified deliveries are always acknowledged with 200, whatever the
    reconciliation outcome, so Stripe does not redeliver unfixable events.
    """

    authentication_classes = []
    permission_classes = [permissions.AllowAny]

    def post(self, request: Request) -> Response:
        config = _config()
        try:
            envelope = config.gateway.verify_webhook(
                request.body, request.META.get("HTTP_STRIPE_SIGNATURE", "")
            )
        except WebhookVerificationError as e:
            logger.warning("Stripe webhook rejected: %s", e)
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        result = config.reconciliation_service.handle_envelope(envelope)
        return Response({"received": True, "outcome": result.outcome.value})


class EventOrderListView(APIView):
    """Handler for GET /api/events/{event_id}/orders"""

    permission_classes = [permissions.IsAdminUser]

    def get(self, request: Request, event_id: str) -> Response:
        try:
            orders = _config().order_service.list_orders_for_event(event_id)
        except DomainError as e:
            return error_response(e)
        return Response({"orders": OrderSerializer(orders, many=True).data})


class OrderValidateView(APIView):
    """Handler for PATCH /api/events/{event_id}/orders/{order_id}/validate"""

    permission_classes = [permissions.IsAdminUser]

    def patch(self, request: Request, event_id: str, order_id: str) -> Response:
        serializer = OrderValidateSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)
        try:
            order = _config().order_service.set_validated(
                event_id, order_id, serializer.validated_data["validated"]
            )
        except DomainError as e:
            return error_response(e)
        return Response({"order": OrderSerializer(order).data})
