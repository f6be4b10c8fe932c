"""Django ORM implementation of the TicketingStore."""

from contextlib import AbstractContextManager
from datetime import datetime

from django.db import transaction
from django.db.models import F, Q
from django.utils import timezone

from ticketing import models
from ticketing.domain import (
    DiscountCode,
    DiscountCodeId,
    DiscountKind,
    EventId,
    Money,
    NewOrder,
    Order,
    OrderId,
    OrderStatus,
    Ticket,
    TicketId,
)
from ticketing.stores.interfaces import TicketingStore


def _to_ticket(row: models.Ticket) -> Ticket:
    return Ticket(
        id=TicketId(row.id),
        event_id=EventId(row.event_id),
        name=row.name,
        price=Money(row.price),
        max_quantity=row.max_quantity,
        sold_quantity=row.sold_quantity,
        is_active=row.is_active,
    )


def _to_discount_code(row: models.DiscountCode) -> DiscountCode:
    return DiscountCode(
        id=DiscountCodeId(row.id),
        event_id=EventId(row.event_id),
        code=row.code,
        kind=DiscountKind(row.kind),
        value=row.value,
        max_uses=row.max_uses,
        used_count=row.used_count,
        valid_from=row.valid_from,
        valid_until=row.valid_until,
        is_active=row.is_active,
    )


def _to_order(row: models.Order, ticket_name: str = "") -> Order:
    return Order(
        id=OrderId(row.id),
        event_id=EventId(row.event_id),
        ticket_id=TicketId(row.ticket_id),
        buyer_id=row.buyer_id,
        buyer_email=row.buyer_email,
        quantity=row.quantity,
        unit_price=Money(row.unit_price),
        discount_amount=Money(row.discount_amount),
        total_amount=Money(row.total_amount),
        discount_code_id=(
            DiscountCodeId(row.discount_code_id) if row.discount_code_id else None
        ),
        status=OrderStatus(row.status),
        checkout_session_id=row.checkout_session_id,
        confirmation_id=row.confirmation_id,
        failure_reason=row.failure_reason,
        validated=row.validated,
        created_at=row.created_at,
        updated_at=row.updated_at,
        ticket_name=ticket_name,
    )


class DjangoTicketingStore(TicketingStore):
    """Relational store using Django ORM.

    Counter updates are single conditional UPDATE statements so the cap is
    checked by the database, not by a read followed by a write.
    """

    def atomic(self) -> AbstractContextManager:
        return transaction.atomic()

    def get_ticket(self, event_id: EventId, ticket_id: TicketId) -> Ticket | None:
        row = models.Ticket.objects.filter(
            pk=ticket_id.value, event_id=event_id.value
        ).first()
        return _to_ticket(row) if row else None

    def find_discount_code(self, event_id: EventId, code: str) -> DiscountCode | None:
        row = models.DiscountCode.objects.filter(
            event_id=event_id.value, code__iexact=code.strip()
        ).first()
        return _to_discount_code(row) if row else None

    def create_order(self, new_order: NewOrder) -> Order:
        row = models.Order.objects.create(
            event_id=new_order.event_id.value,
            ticket_id=new_order.ticket_id.value,
            discount_code_id=(
                new_order.discount_code_id.value if new_order.discount_code_id else None
            ),
            buyer_id=new_order.buyer_id,
            buyer_email=new_order.buyer_email,
            quantity=new_order.quantity,
            unit_price=new_order.unit_price.amount,
            discount_amount=new_order.discount_amount.amount,
            total_amount=new_order.total_amount.amount,
            status=models.Order.STATUS_PENDING,
        )
        return _to_order(row)

    def attach_checkout_session(self, order_id: OrderId, session_id: str) -> bool:
        updated = models.Order.objects.filter(
            pk=order_id.value, status=models.Order.STATUS_PENDING
        ).update(checkout_session_id=session_id, updated_at=timezone.now())
        return updated == 1

    def get_order(self, order_id: OrderId) -> Order | None:
        row = models.Order.objects.filter(pk=order_id.value).first()
        return _to_order(row) if row else None

    def lock_order(self, order_id: OrderId) -> Order | None:
        row = models.Order.objects.select_for_update().filter(pk=order_id.value).first()
        return _to_order(row) if row else None

    def transition_order(
        self,
        order_id: OrderId,
        status: OrderStatus,
        confirmation_id: str | None = None,
        failure_reason: str = "",
    ) -> bool:
        if not status.is_terminal:
            raise ValueError("Orders can only transition to a terminal status")
        updated = models.Order.objects.filter(
            pk=order_id.value, status=models.Order.STATUS_PENDING
        ).update(
            status=status.value,
            confirmation_id=confirmation_id,
            failure_reason=failure_reason,
            updated_at=timezone.now(),
        )
        return updated == 1

    def try_increment_sold(self, ticket_id: TicketId, quantity: int) -> bool:
        updated = (
            models.Ticket.objects.filter(pk=ticket_id.value)
            .filter(
                Q(max_quantity__isnull=True)
                | Q(max_quantity__gte=F("sold_quantity") + quantity)
            )
            .update(sold_quantity=F("sold_quantity") + quantity, updated_at=timezone.now())
        )
        return updated == 1

    def try_increment_discount_usage(self, code_id: DiscountCodeId) -> bool:
        updated = (
            models.DiscountCode.objects.filter(pk=code_id.value)
            .filter(Q(max_uses__isnull=True) | Q(used_count__lt=F("max_uses")))
            .update(used_count=F("used_count") + 1, updated_at=timezone.now())
        )
        return updated == 1

    def list_orders_for_event(self, event_id: EventId) -> list[Order]:
        rows = (
            models.Order.objects.filter(event_id=event_id.value)
            .select_related("ticket")
            .order_by("-created_at")
        )
        return [_to_order(row, ticket_name=row.ticket.name) for row in rows]

    def set_order_validated(self, order_id: OrderId, validated: bool) -> None:
        models.Order.objects.filter(pk=order_id.value).update(
            validated=validated, updated_at=timezone.now()
        )

    def stale_pending_orders(self, created_before: datetime) -> list[Order]:
        rows = models.Order.objects.filter(
            status=models.Order.STATUS_PENDING,
            checkout_session_id__isnull=True,
            created_at__lt=created_before,
        ).order_by("created_at")
        return [_to_order(row) for row in rows]
