"""Courier repositories package."""

from modules.couriers.repositories.django_repository import CourierDjangoPool
from modules.couriers.repositories.interfaces import ICourierPool

__all__ = ["ICourierPool", "CourierDjangoPool"]
