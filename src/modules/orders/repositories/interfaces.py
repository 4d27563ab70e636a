"""Order repository interface (the order ledger).

Extends ``IRepository[Order]`` with what the lifecycle needs: atomic
creation with items, row-locked reads, the status audit trail and the
failed-verification counter.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderStatusHistory


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The aggregate includes OrderItem children and OrderStatusHistory
    records. Mutations must be atomic.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its items atomically.

        ``data`` carries the order fields plus ``items`` (list of dicts with
        ``food_id``, ``quantity``, ``unit_price``). ``total_price`` is
        derived from the items.
        """

    @abstractmethod
    def update(self, id: str, data: Dict[str, Any]) -> Optional[Order]:
        """Apply a field patch to a live order; ``None`` if it does not exist.

        Only lifecycle fields may change; identity, pricing and the
        verification code are fixed at creation.
        """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order with prefetched items and status history."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Order]:
        """Retrieve an order holding a row-level lock until commit."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """List orders with optional filters."""

    @abstractmethod
    def add_history(
        self,
        order_id: UUID,
        status: str,
        notes: str = "",
        old_status: Optional[str] = None,
    ) -> OrderStatusHistory:
        """Record a status change in the order's audit trail."""

    @abstractmethod
    def register_failed_verification(self, order_id: UUID) -> int:
        """Count one wrong delivery code; return the new attempt total."""
