from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from modules.catalog.models import Food, Restaurant
from modules.catalog.repositories.django_repository import FoodDjangoRepository
from modules.couriers.models import Courier
from modules.couriers.repositories.django_repository import CourierDjangoPool
from modules.notifications.senders import EmailNotificationSender
from modules.orders.dtos import (
    DeliveryInfoDTO,
    PaymentConfirmationDTO,
    PlaceOrderDTO,
    PlaceOrderItemDTO,
)
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService

User = get_user_model()


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _clear_cache():
    """Throttle counters live in the cache; start every test from zero."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@pytest.fixture()
def customer_user():
    return User.objects.create_user(
        username="hungry", email="hungry@example.com", password="testpass123"
    )


@pytest.fixture()
def other_user():
    return User.objects.create_user(
        username="neighbour", email="neighbour@example.com", password="testpass123"
    )


@pytest.fixture()
def staff_user():
    return User.objects.create_user(
        username="dispatcher", password="testpass123", is_staff=True
    )


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@pytest.fixture()
def restaurant():
    return Restaurant.objects.create(name="Spice Route", location="Indiranagar")


@pytest.fixture()
def dosa(restaurant):
    return Food.objects.create(
        restaurant=restaurant, name="Masala Dosa", price=Decimal("5.00")
    )


@pytest.fixture()
def coffee(restaurant):
    return Food.objects.create(
        restaurant=restaurant, name="Filter Coffee", price=Decimal("3.00")
    )


# ---------------------------------------------------------------------------
# Couriers
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_courier():
    counter = {"n": 0}

    def _make(user=None, is_available=True):
        counter["n"] += 1
        n = counter["n"]
        return Courier.objects.create(
            user=user,
            name=f"Rider {n}",
            email=f"rider{n}@example.com",
            phone=f"98765432{n:02d}",
            is_available=is_available,
        )

    return _make


@pytest.fixture()
def courier_user():
    return User.objects.create_user(username="rider", password="testpass123")


@pytest.fixture()
def courier(make_courier, courier_user):
    return make_courier(user=courier_user)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@pytest.fixture()
def order_service():
    return OrderService(
        order_repository=OrderDjangoRepository(),
        catalog_repository=FoodDjangoRepository(),
        courier_pool=CourierDjangoPool(),
        notification_sender=EmailNotificationSender(),
    )


@pytest.fixture()
def place_order_dto(customer_user, dosa, coffee):
    """2 x 5.00 + 1 x 3.00 with a confirmed payment."""

    def _build(payment_status="succeeded", items=None, contact_email="hungry@example.com"):
        return PlaceOrderDTO(
            user_id=customer_user.pk,
            items=items
            or [
                PlaceOrderItemDTO(food_id=dosa.id, quantity=2),
                PlaceOrderItemDTO(food_id=coffee.id, quantity=1),
            ],
            delivery_info=DeliveryInfoDTO(
                name="Asha", phone="9123456789", address="12 MG Road"
            ),
            payment=PaymentConfirmationDTO(id="pay_123", status=payment_status),
            contact_email=contact_email,
        )

    return _build
