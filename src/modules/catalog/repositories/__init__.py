"""Catalog repositories package."""

from modules.catalog.repositories.django_repository import FoodDjangoRepository
from modules.catalog.repositories.interfaces import ICatalogRepository

__all__ = ["ICatalogRepository", "FoodDjangoRepository"]
