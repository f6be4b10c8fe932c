from ticketing.handlers.views import (
    CheckoutView,
    EventOrderListView,
    OrderValidateView,
    StripeWebhookView,
)

__all__ = [
    "CheckoutView",
    "StripeWebhookView",
    "EventOrderListView",
    "OrderValidateView",
]
