"""Order, OrderItem, and OrderStatusHistory models.

Invariants kept by this module and ``OrderService``:
- ``total_price`` is the sum of the item subtotals, computed server-side.
- ``OrderItem.unit_price`` snapshots the catalog price at placement time.
- ``status`` only moves forward (see ``VALID_TRANSITIONS``).
- ``verification_code`` is fixed when the order is created.
- ``courier`` stays set after delivery as an audit reference; the courier's
  own ``is_available`` flag is what returns it to the pool.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel, SoftDeleteModel
from modules.orders.constants import (
    ACTIVE_STATES,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    OrderStatus,
)
from shared.domain.events import DomainEventMixin


class Order(DomainEventMixin, SoftDeleteModel):
    """Order aggregate root."""

    user: models.ForeignKey = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    status: models.CharField = models.CharField(
        max_length=20, choices=OrderStatus.choices, default=OrderStatus.PENDING
    )
    total_price: models.DecimalField = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00")
    )

    # Delivery contact
    delivery_name: models.CharField = models.CharField(max_length=255)
    delivery_phone: models.CharField = models.CharField(max_length=20)
    delivery_address: models.TextField = models.TextField()

    # Payment confirmation supplied by the payment gateway
    payment_id: models.CharField = models.CharField(max_length=255)
    payment_status: models.CharField = models.CharField(max_length=50)

    latitude: models.DecimalField = models.DecimalField(
        max_digits=9, decimal_places=6, null=True, blank=True
    )
    longitude: models.DecimalField = models.DecimalField(
        max_digits=9, decimal_places=6, null=True, blank=True
    )

    verification_code: models.CharField = models.CharField(
        max_length=12, editable=False
    )
    verification_attempts: models.PositiveIntegerField = models.PositiveIntegerField(
        default=0
    )
    courier: models.ForeignKey = models.ForeignKey(
        "couriers.Courier",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="orders",
    )
    delivered_at: models.DateTimeField = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
            models.Index(fields=["courier", "status"], name="orders_courier_idx"),
        ]

    # ------------------------------------------------------------------
    # State machine helpers
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES

    @property
    def holds_courier(self) -> bool:
        """``True`` while the assigned courier is busy with this order."""
        return self.courier_id is not None and self.status in ACTIVE_STATES

    def can_transition_to(self, new_status: str) -> bool:
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    def __str__(self) -> str:
        return f"Order {self.id} ({self.status})"


class OrderItem(BaseModel):
    """Line item linking an Order to a Food.

    ``unit_price`` never follows later catalog changes; ``subtotal`` is
    recomputed on every save.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order", on_delete=models.CASCADE, related_name="items"
    )
    food: models.ForeignKey = models.ForeignKey(
        "catalog.Food", on_delete=models.PROTECT, related_name="order_items"
    )
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        default=1, validators=[MinValueValidator(1)]
    )
    unit_price: models.DecimalField = models.DecimalField(max_digits=10, decimal_places=2)
    subtotal: models.DecimalField = models.DecimalField(
        max_digits=10, decimal_places=2, editable=False
    )

    class Meta:
        db_table = "order_items"
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
        ]

    def clean(self) -> None:
        super().clean()
        if self.quantity is not None and self.quantity < 1:
            raise ValidationError({"quantity": "Quantity must be at least 1."})

    def save(self, *args: Any, **kwargs: Any) -> None:
        if self.unit_price is None:
            raise ValidationError({"unit_price": "Unit price is required."})
        self.subtotal = self.quantity * self.unit_price
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.food_id} x{self.quantity} ({self.subtotal})"


class OrderStatusHistory(BaseModel):
    """Append-only audit trail of status transitions.

    ``old_status`` is ``None`` for the creation record.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order", on_delete=models.CASCADE, related_name="status_history"
    )
    old_status: models.CharField = models.CharField(  # noqa: DJ01
        max_length=20, choices=OrderStatus.choices, null=True, blank=True
    )
    new_status: models.CharField = models.CharField(
        max_length=20, choices=OrderStatus.choices
    )
    notes: models.TextField = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["order", "created_at"], name="order_history_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.order_id}: {self.old_status or '-'} -> {self.new_status}"
