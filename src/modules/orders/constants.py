"""Order lifecycle constants.

Status transitions are monotonic: an order only moves forward, and
``DELIVERED`` / ``CANCELLED`` are terminal.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PREPARING = "preparing", "Preparing"
    DELIVERED = "delivered", "Delivered"
    CANCELLED = "cancelled", "Cancelled"


VALID_TRANSITIONS: dict[str, set[str]] = {
    OrderStatus.PENDING: {
        OrderStatus.PREPARING,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.PREPARING: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

TERMINAL_STATES: set[str] = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

# Statuses during which the assigned courier is busy with the order
ACTIVE_STATES: set[str] = {OrderStatus.PENDING, OrderStatus.PREPARING}

VERIFICATION_CODE_SUBJECT = "Your Food Order Delivery Code"

# Upper bound for a single cart line
MAX_ITEM_QUANTITY = 100
