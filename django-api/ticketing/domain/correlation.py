"""Correlation payload carried through the payment gateway.

The payload is embedded as flat string metadata on the checkout session and
echoed back on every event for that session. It is the only link between an
asynchronous payment event and the order that started it.
"""

from dataclasses import dataclass
from typing import Mapping, Self
from uuid import UUID

from ticketing.domain.errors import CorrelationMissingError
from ticketing.domain.value_objects import EventId, OrderId, TicketId


@dataclass(frozen=True)
class Correlation:
    order_id: OrderId
    ticket_id: TicketId
    event_id: EventId
    buyer_id: str | None = None

    def to_metadata(self) -> dict[str, str]:
        return {
            "order_id": str(self.order_id),
            "ticket_id": str(self.ticket_id),
            "event_id": str(self.event_id),
            "buyer_id": self.buyer_id or "",
        }

    @classmethod
    def from_metadata(cls, metadata: Mapping[str, object] | None) -> Self:
        """Rebuild a correlation from gateway metadata.

        Raises:
            CorrelationMissingError: If metadata is absent or malformed.
        """
        if not metadata:
            raise CorrelationMissingError("metadata absent")
        if not isinstance(metadata, Mapping):
            raise CorrelationMissingError("metadata is not an object")
        try:
            order_id = OrderId(UUID(str(metadata["order_id"])))
            ticket_id = TicketId(UUID(str(metadata["ticket_id"])))
            event_id = EventId(UUID(str(metadata["event_id"])))
        except KeyError as exc:
            raise CorrelationMissingError(f"missing key {exc.args[0]}") from exc
        except ValueError as exc:
            raise CorrelationMissingError("malformed identifier") from exc
        buyer_id = str(metadata.get("buyer_id") or "") or None
        return cls(order_id=order_id, ticket_id=ticket_id, event_id=event_id, buyer_id=buyer_id)
