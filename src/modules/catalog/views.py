"""Read-only catalog endpoint used by clients to build a cart."""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.viewsets import ReadOnlyModelViewSet

from modules.catalog.models import Food
from modules.catalog.serializers import FoodSerializer


class FoodViewSet(ReadOnlyModelViewSet):
    serializer_class = FoodSerializer
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_fields = ["restaurant", "is_available"]
    search_fields = ["name", "restaurant__name"]
    ordering_fields = ["name", "price"]

    def get_queryset(self):
        return Food.objects.alive().select_related("restaurant")
