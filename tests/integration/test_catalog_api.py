"""Integration tests for the read-only food catalog."""

from __future__ import annotations

import pytest

pytestmark = pytest.mark.integration

FOODS_URL = "/api/v1/foods/"


@pytest.fixture()
def customer_client(api_client, customer_user):
    api_client.force_authenticate(user=customer_user)
    return api_client


def test_lists_foods_with_restaurant(customer_client, dosa, coffee):
    response = customer_client.get(FOODS_URL, {"ordering": "price"})

    assert response.status_code == 200
    results = response.json()["results"]
    assert [row["name"] for row in results] == ["Filter Coffee", "Masala Dosa"]
    assert results[0]["restaurant_name"] == "Spice Route"
    assert results[0]["price"] == "3.00"


def test_search_by_name(customer_client, dosa, coffee):
    results = customer_client.get(FOODS_URL, {"search": "dosa"}).json()["results"]
    assert [row["id"] for row in results] == [str(dosa.id)]


def test_soft_deleted_food_hidden(customer_client, dosa, coffee):
    dosa.delete()
    results = customer_client.get(FOODS_URL).json()["results"]
    assert [row["id"] for row in results] == [str(coffee.id)]


def test_catalog_is_read_only(customer_client, restaurant):
    response = customer_client.post(
        FOODS_URL,
        {"name": "Free", "price": "0.00", "restaurant": str(restaurant.id)},
        format="json",
    )
    assert response.status_code == 405
