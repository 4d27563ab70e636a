from rest_framework import serializers

from modules.catalog.models import Food


class FoodSerializer(serializers.ModelSerializer):
    restaurant_name = serializers.CharField(source="restaurant.name", read_only=True)

    class Meta:
        model = Food
        fields = [
            "id",
            "name",
            "description",
            "price",
            "is_available",
            "restaurant_id",
            "restaurant_name",
        ]
        read_only_fields = fields
