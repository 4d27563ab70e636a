"""Courier model.

A courier is the unit of physical fulfillment capacity. ``is_available`` is
owned by the order lifecycle: it flips to ``False`` when the courier is
reserved for an order and back to ``True`` on verified delivery or
cancellation. Nothing else writes it.

Login credentials live on the platform user linked through ``user``; a
courier is therefore a single record carrying the delivery role rather than
a second copy of the user's contact data.
"""

from __future__ import annotations

from django.conf import settings
from django.core.validators import RegexValidator
from django.db import models

from modules.core.models import SoftDeleteModel

phone_validator = RegexValidator(
    regex=r"^\d{10}$",
    message="Phone number must have exactly 10 digits.",
)


class Courier(SoftDeleteModel):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="courier_profile",
    )
    name = models.CharField(max_length=255)
    email = models.EmailField(max_length=254, unique=True)
    phone = models.CharField(max_length=10, validators=[phone_validator])
    is_available = models.BooleanField(default=True)

    class Meta:
        db_table = "couriers"
        ordering = ["name"]
        indexes = [
            models.Index(
                fields=["is_available", "updated_at"],
                name="couriers_available_idx",
            ),
        ]

    def __str__(self) -> str:
        state = "available" if self.is_available else "busy"
        return f"{self.name} ({state})"
