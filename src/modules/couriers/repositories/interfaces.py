"""Courier pool interface.

The pool is the one shared mutable resource of the order lifecycle.
Implementations must make ``reserve_any`` a single atomic pick-and-flip:
two concurrent callers never receive the same courier.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.couriers.models import Courier


class ICourierPool(IRepository["Courier"]):
    @abstractmethod
    def reserve_any(self) -> Optional[UUID]:
        """Mark one available courier as busy and return its ID.

        Returns ``None`` when no courier is available.
        """

    @abstractmethod
    def release(self, courier_id: UUID) -> None:
        """Return a courier to the pool.

        Idempotent: releasing an available or unknown courier is a no-op.
        """
