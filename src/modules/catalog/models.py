"""Restaurant and Food models.

The menu itself is managed by the restaurant back office; this context only
needs enough of it to price an order at placement time.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import SoftDeleteModel


class Restaurant(SoftDeleteModel):
    name = models.CharField(max_length=255)
    location = models.CharField(max_length=255)

    class Meta:
        db_table = "restaurants"
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Food(SoftDeleteModel):
    """A priced menu entry.

    ``is_available`` lets a restaurant pull a dish temporarily without
    deleting it; unavailable foods cannot be priced into new orders.
    """

    restaurant = models.ForeignKey(
        "catalog.Restaurant",
        on_delete=models.PROTECT,
        related_name="foods",
    )
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    is_available = models.BooleanField(default=True)

    class Meta:
        db_table = "foods"
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gt=0),
                name="foods_price_positive",
            ),
        ]

    def clean(self) -> None:
        super().clean()
        if self.price is not None and self.price <= 0:
            raise ValidationError({"price": "Price must be greater than zero."})

    def __str__(self) -> str:
        return f"{self.name} ({self.price})"
