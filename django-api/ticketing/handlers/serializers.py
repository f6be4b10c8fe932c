"""Serializers for request validation and domain model responses."""

from django.conf import settings
from rest_framework import serializers


class CheckoutRequestSerializer(serializers.Serializer):
    """Validates the buyer-facing checkout request."""

    event_id = serializers.UUIDField()
    ticket_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    discount_code = serializers.CharField(
        max_length=50, required=False, allow_blank=True, allow_null=True
    )
    buyer_email = serializers.EmailField()
    success_redirect_url = serializers.URLField(required=False)
    cancel_redirect_url = serializers.URLField(required=False)

    def validate(self, attrs):
        attrs.setdefault("success_redirect_url", settings.CHECKOUT_SUCCESS_URL)
        attrs.setdefault("cancel_redirect_url", settings.CHECKOUT_CANCEL_URL)
        return attrs


class CheckoutResponseSerializer(serializers.Serializer):
    """Serializer for CheckoutResult."""

    checkout_url = serializers.URLField()
    session_id = serializers.CharField()


class OrderSerializer(serializers.Serializer):
    """Serializer for Order domain model."""

    id = serializers.CharField()
    event_id = serializers.CharField()
    ticket_id = serializers.CharField()
    ticket_name = serializers.CharField()
    buyer_id = serializers.CharField(allow_null=True)
    buyer_email = serializers.EmailField()
    quantity = serializers.IntegerField()
    unit_price = serializers.CharField()
    discount_amount = serializers.CharField()
    total_amount = serializers.CharField()
    status = serializers.CharField(source="status.value")
    failure_reason = serializers.CharField()
    validated = serializers.BooleanField()
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class OrderValidateSerializer(serializers.Serializer):
    validated = serializers.BooleanField()
