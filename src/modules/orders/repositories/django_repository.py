"""Django ORM implementation of the Order repository.

Writes are wrapped in ``transaction.atomic()`` so the Order aggregate
(Order + OrderItems + outbox rows) is persisted all-or-nothing.
Status changes lock the order row with ``select_for_update()``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F

from modules.core.models import OutboxEvent
from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)

ORDERS_TOPIC = "orders"

UPDATABLE_FIELDS = frozenset(
    {"status", "delivered_at", "delivery_name", "delivery_phone", "delivery_address"}
)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        fields = {key: value for key, value in data.items() if key != "items"}
        order = Order(**fields)
        order.save()

        total = Decimal("0.00")
        items = data.get("items", [])
        for item_data in items:
            item = OrderItem(
                order=order,
                food_id=item_data["food_id"],
                quantity=item_data["quantity"],
                unit_price=item_data["unit_price"],
            )
            item.save()
            total += item.subtotal

        order.total_price = total
        order.save(update_fields=["total_price", "updated_at"])

        logger.info(
            "order.persisted",
            order_id=str(order.id),
            item_count=len(items),
            total_price=str(total),
        )
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve a live order with its relations eager-loaded.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return (
                Order.objects.alive()
                .select_related("user", "courier")
                .prefetch_related("items__food", "status_history")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE).

        Must run inside a transaction. Only the order row is locked; the
        courier row is updated through the courier pool.
        """
        try:
            return Order.objects.alive().select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """List live orders, newest first.

        Supported filter keys are plain ORM look-ups, e.g. ``status``,
        ``user_id``, ``courier_id``.
        """
        queryset = (
            Order.objects.alive()
            .select_related("user", "courier")
            .prefetch_related("items__food", "status_history")
        )
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    # ------------------------------------------------------------------
    # Save (IRepository contract)
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        """Persist an order and flush its pending domain events to the outbox."""
        entity.save()

        events = entity.pull_domain_events()
        for event in events:
            OutboxEvent.record(event, topic=ORDERS_TOPIC)

        logger.info("order.saved", order_id=str(entity.id), event_count=len(events))
        return entity

    @transaction.atomic
    def update(self, id: str, data: Dict[str, Any]) -> Optional[Order]:
        frozen = set(data) - UPDATABLE_FIELDS
        if frozen:
            raise ValueError(f"Fields cannot be updated: {sorted(frozen)}")

        order = self.get_for_update(id)
        if order is None:
            return None
        for field, value in data.items():
            setattr(order, field, value)
        return self.save(order)

    # ------------------------------------------------------------------
    # Order-specific writes
    # ------------------------------------------------------------------

    def add_history(
        self,
        order_id: UUID,
        status: str,
        notes: str = "",
        old_status: Optional[str] = None,
    ) -> OrderStatusHistory:
        history = OrderStatusHistory.objects.create(
            order_id=order_id,
            old_status=old_status,
            new_status=status,
            notes=notes,
        )
        logger.info(
            "order.history_added",
            order_id=str(order_id),
            old_status=old_status,
            new_status=status,
        )
        return history

    def register_failed_verification(self, order_id: UUID) -> int:
        Order.objects.filter(id=order_id).update(
            verification_attempts=F("verification_attempts") + 1
        )
        return (
            Order.objects.filter(id=order_id)
            .values_list("verification_attempts", flat=True)
            .get()
        )

