"""Unit tests for the catalog repository."""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest
from django.core.exceptions import ValidationError

from modules.catalog.models import Food
from modules.catalog.repositories.django_repository import FoodDjangoRepository

pytestmark = pytest.mark.unit


@pytest.fixture()
def repo():
    return FoodDjangoRepository()


class TestGetPrice:
    def test_returns_catalog_price(self, repo, dosa):
        assert repo.get_price(str(dosa.id)) == Decimal("5.00")

    def test_unknown_food(self, repo):
        assert repo.get_price(str(uuid4())) is None

    def test_malformed_id(self, repo):
        assert repo.get_price("dosa") is None

    def test_unavailable_food_has_no_price(self, repo, dosa):
        dosa.is_available = False
        dosa.save()
        assert repo.get_price(str(dosa.id)) is None

    def test_soft_deleted_food_has_no_price(self, repo, dosa):
        dosa.delete()
        assert repo.get_price(str(dosa.id)) is None


class TestFoodModel:
    def test_non_positive_price_rejected(self, restaurant):
        food = Food(restaurant=restaurant, name="Free Lunch", price=Decimal("0.00"))
        with pytest.raises(ValidationError):
            food.full_clean()

    def test_list_by_restaurant(self, repo, dosa, coffee, restaurant):
        foods = repo.list({"restaurant": restaurant})
        assert {food.id for food in foods} == {dosa.id, coffee.id}
