from django.urls import path

from ticketing.handlers import (
    CheckoutView,
    EventOrderListView,
    OrderValidateView,
    StripeWebhookView,
)

urlpatterns = [
    path("checkout", CheckoutView.as_view(), name="checkout"),
    path("webhooks/stripe", StripeWebhookView.as_view(), name="stripe-webhook"),
    path(
        "events/<str:event_id>/orders",
        EventOrderListView.as_view(),
        name="event-order-list",
    ),
    path(
        "events/<str:event_id>/orders/<str:order_id>/validate",
        OrderValidateView.as_view(),
        name="order-validate",
    ),
]
