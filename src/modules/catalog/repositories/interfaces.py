"""Catalog repository interface.

The order lifecycle prices line items through ``get_price`` and never
trusts a price supplied by the client.
"""

from __future__ import annotations

from abc import abstractmethod
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.catalog.models import Food


class ICatalogRepository(IRepository["Food"]):
    @abstractmethod
    def get_price(self, food_id: str) -> Optional[Decimal]:
        """Return the current unit price, or ``None`` if the food cannot be sold."""
