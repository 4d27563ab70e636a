"""Order DTOs for the Service Layer.

Framework-agnostic, immutable pydantic v2 models exchanged between the API
layer (DRF serializers) and ``OrderService``. Prices and totals are not part
of the input contract: the service prices every item from the catalog.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modules.orders.constants import MAX_ITEM_QUANTITY

COORDINATE_QUANTUM = Decimal("0.000001")


class PlaceOrderItemDTO(BaseModel):
    """A cart line: which food and how many."""

    model_config = ConfigDict(frozen=True)

    food_id: UUID
    quantity: int

    @field_validator("quantity")
    @classmethod
    def quantity_within_limits(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        if v > MAX_ITEM_QUANTITY:
            raise ValueError(f"Quantity must be at most {MAX_ITEM_QUANTITY}.")
        return v


class DeliveryInfoDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    address: str = Field(min_length=1)


class PaymentConfirmationDTO(BaseModel):
    """Outcome reported by the payment gateway for this checkout."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    status: str


class LocationDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: Decimal = Field(ge=-90, le=90)
    lng: Decimal = Field(ge=-180, le=180)

    @field_validator("lat", "lng")
    @classmethod
    def quantize_coordinate(cls, v: Decimal) -> Decimal:
        return v.quantize(COORDINATE_QUANTUM)


class PlaceOrderDTO(BaseModel):
    """Immutable input for ``OrderService.place_order``.

    ``items`` must contain at least one line. The same food may appear on
    several lines; each line is priced and stored on its own.

    ``contact_email`` is where the verification code is sent; when missing
    the order is still placed and the code stays available on the order.
    """

    model_config = ConfigDict(frozen=True)

    user_id: int
    items: List[PlaceOrderItemDTO]
    delivery_info: DeliveryInfoDTO
    payment: PaymentConfirmationDTO
    location: Optional[LocationDTO] = None
    contact_email: Optional[str] = None

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(
        cls, v: List[PlaceOrderItemDTO]
    ) -> List[PlaceOrderItemDTO]:
        if not v:
            raise ValueError("Order must have at least one item.")
        return v
