"""Order DRF serializers for API input/output.

Business logic lives in the service layer, which receives pydantic DTOs
built from the validated data. Request payloads carry no prices: any
``price`` or ``totalPrice`` sent by a client is ignored.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.constants import MAX_ITEM_QUANTITY, OrderStatus
from modules.orders.models import Order, OrderItem, OrderStatusHistory

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CreateOrderItemSerializer(serializers.Serializer):
    food_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_ITEM_QUANTITY)


class DeliveryInfoSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    phone = serializers.RegexField(
        r"^\+?\d{10,15}$",
        max_length=20,
        error_messages={"invalid": "Enter a valid phone number."},
    )
    address = serializers.CharField()


class PaymentInfoSerializer(serializers.Serializer):
    id = serializers.CharField(max_length=255)
    status = serializers.CharField(max_length=50)


class LocationSerializer(serializers.Serializer):
    lat = serializers.FloatField(min_value=-90, max_value=90)
    lng = serializers.FloatField(min_value=-180, max_value=180)


class CreateOrderSerializer(serializers.Serializer):
    """Validates the order placement payload."""

    items = CreateOrderItemSerializer(many=True, allow_empty=False)
    delivery_info = DeliveryInfoSerializer()
    payment_info = PaymentInfoSerializer()
    location = LocationSerializer(required=False, allow_null=True)


class VerifyDeliverySerializer(serializers.Serializer):
    code = serializers.RegexField(r"^\d{1,12}$", max_length=12)


class StatusOverrideSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)
    notes = serializers.CharField(required=False, default="", allow_blank=True)


class CancelOrderSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, default="", allow_blank=True)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderItemSerializer(serializers.ModelSerializer):
    food_name = serializers.CharField(source="food.name", read_only=True)

    class Meta:
        model = OrderItem
        fields = ["id", "food_id", "food_name", "quantity", "unit_price", "subtotal"]
        read_only_fields = fields


class StatusHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderStatusHistory
        fields = ["id", "old_status", "new_status", "notes", "created_at"]
        read_only_fields = fields


class CourierOrderSerializer(serializers.ModelSerializer):
    """Order as shown to the courier carrying it: no delivery code."""

    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "status",
            "total_price",
            "delivery_name",
            "delivery_phone",
            "delivery_address",
            "latitude",
            "longitude",
            "courier_id",
            "created_at",
            "delivered_at",
            "items",
        ]
        read_only_fields = fields


class OrderSerializer(CourierOrderSerializer):
    """Full order as shown to its customer and to staff."""

    status_history = StatusHistorySerializer(many=True, read_only=True)

    class Meta(CourierOrderSerializer.Meta):
        fields = CourierOrderSerializer.Meta.fields + [
            "user_id",
            "payment_id",
            "payment_status",
            "verification_code",
            "updated_at",
            "status_history",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for order lists (no nested relations)."""

    class Meta:
        model = Order
        fields = [
            "id",
            "user_id",
            "courier_id",
            "status",
            "total_price",
            "created_at",
        ]
        read_only_fields = fields
