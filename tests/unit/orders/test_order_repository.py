"""Unit tests for the Django order repository."""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest

from modules.core.models import OutboxEvent
from modules.orders.constants import OrderStatus
from modules.orders.events import OrderStatusChanged
from modules.orders.repositories.django_repository import OrderDjangoRepository

pytestmark = pytest.mark.unit


@pytest.fixture()
def repo():
    return OrderDjangoRepository()


@pytest.fixture()
def order(repo, customer_user, dosa, coffee, courier):
    return repo.create(
        {
            "user_id": customer_user.pk,
            "items": [
                {"food_id": dosa.id, "quantity": 2, "unit_price": Decimal("5.00")},
                {"food_id": coffee.id, "quantity": 1, "unit_price": Decimal("3.00")},
            ],
            "delivery_name": "Asha",
            "delivery_phone": "9123456789",
            "delivery_address": "12 MG Road",
            "payment_id": "pay_1",
            "payment_status": "succeeded",
            "verification_code": "482915",
            "courier_id": courier.id,
        }
    )


class TestCreate:
    def test_total_is_sum_of_subtotals(self, order):
        assert order.total_price == Decimal("13.00")
        assert order.status == OrderStatus.PENDING

    def test_unit_price_is_a_snapshot(self, repo, order, dosa):
        dosa.price = Decimal("99.00")
        dosa.save()

        stored = repo.get_by_id(str(order.id))
        item = stored.items.get(food=dosa)
        assert item.unit_price == Decimal("5.00")


class TestRead:
    def test_get_by_invalid_id(self, repo):
        assert repo.get_by_id("nope") is None
        assert repo.get_for_update("nope") is None

    def test_soft_deleted_order_hidden(self, repo, order):
        order.delete()
        assert repo.get_by_id(str(order.id)) is None

    def test_list_filters(self, repo, order, courier):
        assert [o.id for o in repo.list({"courier_id": courier.id})] == [order.id]
        assert repo.list({"status": OrderStatus.DELIVERED}) == []


class TestWrites:
    def test_save_flushes_events_to_outbox(self, repo, order):
        order.add_domain_event(
            OrderStatusChanged(
                aggregate_id=order.id, old_status="pending", new_status="preparing"
            )
        )

        repo.save(order)

        assert order.domain_events == []
        assert OutboxEvent.objects.filter(
            aggregate_id=str(order.id), event_type="OrderStatusChanged"
        ).count() == 1

    def test_update_lifecycle_fields(self, repo, order):
        updated = repo.update(
            str(order.id), {"status": OrderStatus.PREPARING, "delivery_address": "Gate 2"}
        )

        assert updated.status == OrderStatus.PREPARING
        order.refresh_from_db()
        assert order.delivery_address == "Gate 2"

    def test_update_rejects_fixed_fields(self, repo, order):
        with pytest.raises(ValueError):
            repo.update(str(order.id), {"verification_code": "000000"})

        order.refresh_from_db()
        assert order.verification_code == "482915"

    def test_update_missing_order(self, repo):
        assert repo.update(str(uuid4()), {"status": OrderStatus.PREPARING}) is None

    def test_failed_verifications_are_counted(self, repo, order):
        assert repo.register_failed_verification(order.id) == 1
        assert repo.register_failed_verification(order.id) == 2

    def test_history_records_transition(self, repo, order):
        history = repo.add_history(
            order_id=order.id,
            status=OrderStatus.PREPARING,
            notes="kitchen started",
            old_status=OrderStatus.PENDING,
        )
        assert history.old_status == OrderStatus.PENDING
        assert history.new_status == OrderStatus.PREPARING
