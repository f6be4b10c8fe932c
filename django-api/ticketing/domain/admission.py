"""Pre-payment inventory check.

Admission reads `sold_quantity` without reserving anything. The cap is
enforced again, atomically, when a payment is confirmed.
"""

from ticketing.domain.errors import InsufficientInventoryError, TicketUnavailableError
from ticketing.domain.models import Ticket
from ticketing.domain.value_objects import Quantity


def admit(ticket: Ticket, quantity: Quantity) -> None:
    """Raise if `quantity` tickets cannot currently be sold.

    Raises:
        TicketUnavailableError: If the ticket is inactive.
        InsufficientInventoryError: If the request would exceed max_quantity.
    """
    if not ticket.is_active:
        raise TicketUnavailableError(str(ticket.id))
    if (
        ticket.max_quantity is not None
        and ticket.sold_quantity + quantity.value > ticket.max_quantity
    ):
        raise InsufficientInventoryError(str(ticket.id), ticket.remaining or 0)
