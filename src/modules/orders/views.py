"""Order API views.

Exposes ``OrderService`` over HTTP with a DRF ViewSet. Domain exceptions
are caught and translated into HTTP status codes; generic exceptions are
never swallowed.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as DTOValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.permissions import BasePermission, IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.catalog.repositories.django_repository import FoodDjangoRepository
from modules.couriers.repositories.django_repository import CourierDjangoPool
from modules.notifications.senders import get_notification_sender
from modules.orders.dtos import (
    DeliveryInfoDTO,
    LocationDTO,
    PaymentConfirmationDTO,
    PlaceOrderDTO,
    PlaceOrderItemDTO,
)
from modules.orders.exceptions import (
    InvalidCode,
    InvalidOrderStatus,
    ItemNotFound,
    NoCourierAvailable,
    OrderNotFound,
    PaymentNotConfirmed,
    PersistenceFailure,
    VerificationLocked,
)
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    CancelOrderSerializer,
    CreateOrderSerializer,
    OrderListSerializer,
    OrderSerializer,
    StatusOverrideSerializer,
    VerifyDeliverySerializer,
)
from modules.orders.services import OrderService

ORDER_NOT_FOUND = {"detail": "Order not found."}


def build_order_service() -> OrderService:
    """Wire ``OrderService`` with the Django repositories and configured sender."""
    return OrderService(
        order_repository=OrderDjangoRepository(),
        catalog_repository=FoodDjangoRepository(),
        courier_pool=CourierDjangoPool(),
        notification_sender=get_notification_sender(),
    )


class OrderViewSet(GenericViewSet):
    """ViewSet for the order lifecycle.

    Customers place, list, read and cancel their own orders. The courier
    assigned to an order submits its delivery code. Staff see every order
    and may override its status.
    """

    filterset_class = OrderFilter
    ordering_fields = ["created_at", "total_price", "status"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_order_service()

    def get_permissions(self) -> list[BasePermission]:
        if self.action == "partial_update":
            return [IsAdminUser()]
        return [IsAuthenticated()]

    def get_throttles(self) -> list[BaseThrottle]:
        """Per-action throttling scopes."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action == "verify":
            throttle_scope = "order_verification"
        elif self.action in {"list", "retrieve"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    def get_queryset(self):
        queryset = Order.objects.alive().select_related("user", "courier")
        if not self.request.user.is_staff:
            queryset = queryset.filter(user_id=self.request.user.pk)
        return queryset

    # ------------------------------------------------------------------
    # Access helpers
    # ------------------------------------------------------------------

    def _get_visible_order(self, request: Request, pk: str | None) -> Order | None:
        """Return the order if the caller may see it, else ``None``."""
        if pk is None:
            return None
        try:
            order = self._service.get_order(pk)
        except OrderNotFound:
            return None
        user = request.user
        if user.is_staff or order.user_id == user.pk or _is_assigned_courier(user, order):
            return order
        return None

    # ------------------------------------------------------------------
    # Place
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/

        Returns 201 with the created order, including its delivery code.
        """
        create_serializer = CreateOrderSerializer(data=request.data)
        create_serializer.is_valid(raise_exception=True)
        data = create_serializer.validated_data

        location = data.get("location")
        try:
            dto = PlaceOrderDTO(
                user_id=request.user.pk,
                items=[
                    PlaceOrderItemDTO(food_id=item["food_id"], quantity=item["quantity"])
                    for item in data["items"]
                ],
                delivery_info=DeliveryInfoDTO(**data["delivery_info"]),
                payment=PaymentConfirmationDTO(**data["payment_info"]),
                location=LocationDTO(**location) if location else None,
                contact_email=request.user.email or None,
            )
        except DTOValidationError as exc:
            return Response(
                {"detail": exc.errors(include_url=False, include_context=False)},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            order = self._service.place_order(dto)
        except PaymentNotConfirmed as exc:
            return Response(
                {"detail": str(exc)},
                status=status.HTTP_402_PAYMENT_REQUIRED,
            )
        except ItemNotFound as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
        except NoCourierAvailable as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        except PersistenceFailure as exc:
            return Response(
                {"detail": str(exc)},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/

        Customers get their own orders; staff get every order and can
        filter by status, user, courier, date and total range.
        """
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = OrderListSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        order = self._get_visible_order(request, pk)
        if order is None or not (
            request.user.is_staff or order.user_id == request.user.pk
        ):
            return Response(ORDER_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        return Response(OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Delivery verification
    # ------------------------------------------------------------------

    @action(detail=True, methods=["post"])
    def verify(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/verify/

        Submitted by the assigned courier (or staff) with the code the
        customer read out at the door.
        """
        order = self._get_visible_order(request, pk)
        if order is None:
            return Response(ORDER_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        if not (request.user.is_staff or _is_assigned_courier(request.user, order)):
            return Response(
                {"detail": "Only the assigned courier can confirm this delivery."},
                status=status.HTTP_403_FORBIDDEN,
            )

        serializer = VerifyDeliverySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            order = self._service.verify_delivery(
                order_id=order.id,
                code=serializer.validated_data["code"],
            )
        except OrderNotFound:
            return Response(ORDER_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        except VerificationLocked as exc:
            return Response(
                {"detail": str(exc)},
                status=status.HTTP_429_TOO_MANY_REQUESTS,
            )
        except InvalidCode as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        except InvalidOrderStatus as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            {"detail": "Code verified, order delivered.", "status": order.status}
        )

    # ------------------------------------------------------------------
    # Administrative status override
    # ------------------------------------------------------------------

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/ (staff only)"""
        if pk is None:
            return Response(ORDER_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)

        serializer = StatusOverrideSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            order = self._service.override_status(
                order_id=pk,
                new_status=serializer.validated_data["status"],
                notes=serializer.validated_data["notes"],
            )
        except OrderNotFound:
            return Response(ORDER_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        except InvalidOrderStatus as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Cancel
    # ------------------------------------------------------------------

    @action(detail=True, methods=["post"])
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/cancel/ (owner or staff)"""
        order = self._get_visible_order(request, pk)
        if order is None or not (
            request.user.is_staff or order.user_id == request.user.pk
        ):
            return Response(ORDER_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)

        serializer = CancelOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            order = self._service.cancel_order(
                order_id=order.id,
                notes=serializer.validated_data["notes"],
            )
        except OrderNotFound:
            return Response(ORDER_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        except InvalidOrderStatus as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(OrderSerializer(order).data)


def _is_assigned_courier(user, order: Order) -> bool:
    courier = order.courier
    return courier is not None and courier.user_id is not None and courier.user_id == user.pk
