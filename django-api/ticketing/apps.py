from django.apps import AppConfig


class TicketingConfig(AppConfig):
    """Composition root: one store and one gateway per process."""

    name = "ticketing"

    def ready(self) -> None:
        from ticketing.gateways.stripe_gateway import StripeGateway
        from ticketing.stores.django_store import DjangoTicketingStore

        self.configure(DjangoTicketingStore(), StripeGateway.from_settings())

    def configure(self, store, gateway) -> None:
        """Wire services to a store and a payment gateway."""
        from ticketing.services.checkout_service import CheckoutService
        from ticketing.services.order_service import OrderService
        from ticketing.services.reconciliation_service import ReconciliationService

        self.store = store
        self.gateway = gateway
        self.checkout_service = CheckoutService(store, gateway)
        self.reconciliation_service = ReconciliationService(store, gateway)
        self.order_service = OrderService(store)
