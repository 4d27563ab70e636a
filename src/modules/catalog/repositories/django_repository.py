"""Django ORM implementation of the catalog repository.

Look-ups return ``None`` instead of raising; the service layer decides how
a missing food is reported.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError

from modules.catalog.models import Food
from modules.catalog.repositories.interfaces import ICatalogRepository

logger = structlog.get_logger(__name__)


class FoodDjangoRepository(ICatalogRepository):
    def get_by_id(self, id: str) -> Optional[Food]:
        """Retrieve a live food by primary key; ``None`` for unknown/invalid IDs."""
        try:
            return (
                Food.objects.alive()
                .select_related("restaurant")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_price(self, food_id: str) -> Optional[Decimal]:
        food = self.get_by_id(food_id)
        if food is None or not food.is_available:
            return None
        return food.price

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Food]:
        queryset = Food.objects.alive().select_related("restaurant")
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def save(self, entity: Food) -> Food:
        entity.save()
        logger.info("food.saved", food_id=str(entity.id))
        return entity
