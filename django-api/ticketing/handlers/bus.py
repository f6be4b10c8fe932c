"""Entry point for payment events delivered through an event bus."""

from typing import Any, Mapping

from django.apps import apps


def handle_bus_event(envelope: Mapping[str, Any]) -> str:
    """Reconcile one bus delivery and return the outcome name.

    Malformed and foreign events are acknowledged, never raised, so the bus
    does not redeliver them.
    """
    service = apps.get_app_config("ticketing").reconciliation_service
    return service.handle_envelope(envelope).outcome.value
