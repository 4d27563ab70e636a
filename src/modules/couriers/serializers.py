from rest_framework import serializers

from modules.couriers.models import Courier


class CourierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Courier
        fields = [
            "id",
            "user_id",
            "name",
            "email",
            "phone",
            "is_available",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
