"""Catalog lookup: read-only access to tickets and discount codes."""

from uuid import UUID

from ticketing.domain import DiscountCode, EventId, Ticket, TicketId
from ticketing.domain.errors import InvalidIdentifierError, TicketNotFoundError
from ticketing.stores.interfaces import TicketingStore


def parse_uuid(value: str, field: str) -> UUID:
    """Parse a UUID string.

    Raises:
        InvalidIdentifierError: If the value is not a valid UUID.
    """
    try:
        return UUID(str(value))
    except ValueError as exc:
        raise InvalidIdentifierError(field) from exc


class CatalogService:
    """Service for ticket and discount code lookups."""

    def __init__(self, store: TicketingStore) -> None:
        self._store = store

    def get_ticket(self, event_id: EventId, ticket_id: TicketId) -> Ticket:
        """Return a ticket of the event.

        Raises:
            TicketNotFoundError: If the ticket does not exist for this event.
        """
        ticket = self._store.get_ticket(event_id, ticket_id)
        if ticket is None:
            raise TicketNotFoundError(str(ticket_id))
        return ticket

    def find_discount_code(self, event_id: EventId, code: str | None) -> DiscountCode | None:
        """Return the matching discount code, or None for a blank or unknown code."""
        if not code or not code.strip():
            return None
        return self._store.find_discount_code(event_id, code)
