"""Courier API views.

Staff browse the courier pool; a courier reads the orders assigned to them.
Availability is never written here: it belongs to the order lifecycle.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.permissions import BasePermission, IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ReadOnlyModelViewSet

from modules.couriers.exceptions import CourierNotFound
from modules.couriers.models import Courier
from modules.couriers.repositories.django_repository import CourierDjangoPool
from modules.couriers.serializers import CourierSerializer
from modules.orders.serializers import CourierOrderSerializer
from modules.orders.views import build_order_service


class CourierViewSet(ReadOnlyModelViewSet):
    """Read-only courier pool (staff) plus per-courier order lists."""

    serializer_class = CourierSerializer
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_fields = ["is_available"]
    search_fields = ["name", "email"]
    ordering_fields = ["name", "updated_at"]

    def get_permissions(self) -> list[BasePermission]:
        if self.action == "orders":
            return [IsAuthenticated()]
        return [IsAdminUser()]

    def get_queryset(self):
        return Courier.objects.alive()

    def _get_courier(self, pk: str | None) -> Courier:
        courier = CourierDjangoPool().get_by_id(pk) if pk else None
        if courier is None:
            raise CourierNotFound(f"Courier {pk} not found.")
        return courier

    @action(detail=True, methods=["get"])
    def orders(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/couriers/{pk}/orders/

        Visible to staff and to the courier's own user account.
        """
        try:
            courier = self._get_courier(pk)
        except CourierNotFound:
            return Response(
                {"detail": "Courier not found."},
                status=status.HTTP_404_NOT_FOUND,
            )

        if not (request.user.is_staff or courier.user_id == request.user.pk):
            return Response(
                {"detail": "You can only view your own deliveries."},
                status=status.HTTP_403_FORBIDDEN,
            )

        orders = build_order_service().list_courier_orders(courier.id)
        page = self.paginate_queryset(orders)
        serializer = CourierOrderSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)
