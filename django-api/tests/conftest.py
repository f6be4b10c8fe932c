"""Pytest configuration and shared fixtures."""

from decimal import Decimal

import pytest
from django.apps import apps
from rest_framework.test import APIClient

from ticketing import models
from ticketing.stores.django_store import DjangoTicketingStore
from tests.fakes import FakePaymentGateway, InMemoryTicketingStore


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def store() -> InMemoryTicketingStore:
    return InMemoryTicketingStore()


@pytest.fixture
def gateway() -> FakePaymentGateway:
    return FakePaymentGateway()


@pytest.fixture
def wired_app(db, gateway):
    """Point the app's services at the Django store and a fake gateway."""
    config = apps.get_app_config("ticketing")
    previous = (config.store, config.gateway)
    config.configure(DjangoTicketingStore(), gateway)
    yield config
    config.configure(*previous)


@pytest.fixture
def event_row(db) -> models.Event:
    return models.Event.objects.create(name="Salsa Night", location="Havana Club")


@pytest.fixture
def ticket_row(event_row) -> models.Ticket:
    return models.Ticket.objects.create(
        event=event_row, name="General admission", price=Decimal("20.00"), max_quantity=100
    )


@pytest.fixture
def staff_client(db, api_client) -> APIClient:
    from django.contrib.auth.models import User

    user = User.objects.create_user(username="staff", password="pass12345", is_staff=True)
    api_client.force_authenticate(user=user)
    return api_client
