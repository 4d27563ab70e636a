"""Domain events for the Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderPlaced(DomainEvent):
    """Raised when an order is placed and a courier is assigned."""

    courier_id: Optional[UUID] = None


@dataclass(frozen=True)
class OrderDelivered(DomainEvent):
    """Raised when the delivery code is verified."""

    courier_id: Optional[UUID] = None


@dataclass(frozen=True)
class OrderCancelled(DomainEvent):
    """Raised when an order is cancelled before delivery."""


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    """Raised on an administrative status change."""

    old_status: str = ""
    new_status: str = ""
