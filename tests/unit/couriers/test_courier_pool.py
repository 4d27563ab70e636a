"""Unit tests for the Django courier pool."""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import patch

import pytest
from django.utils import timezone

from modules.couriers.models import Courier
from modules.couriers.repositories.django_repository import CourierDjangoPool

pytestmark = pytest.mark.unit


@pytest.fixture()
def pool():
    return CourierDjangoPool()


class TestReserveAny:
    def test_reserves_available_courier(self, pool, make_courier):
        courier = make_courier()

        assert pool.reserve_any() == courier.id
        courier.refresh_from_db()
        assert courier.is_available is False

    def test_empty_pool_returns_none(self, pool, make_courier):
        make_courier(is_available=False)
        assert pool.reserve_any() is None

    def test_no_couriers_returns_none(self, pool):
        assert pool.reserve_any() is None

    def test_each_courier_reserved_once(self, pool, make_courier):
        couriers = {make_courier().id for _ in range(3)}

        reserved = [pool.reserve_any() for _ in range(3)]

        assert set(reserved) == couriers
        assert pool.reserve_any() is None

    def test_least_recently_used_first(self, pool, make_courier):
        recent = make_courier()
        idle = make_courier()
        Courier.objects.filter(pk=idle.pk).update(
            updated_at=timezone.now() - timedelta(hours=1)
        )

        assert pool.reserve_any() == idle.id
        assert pool.reserve_any() == recent.id

    def test_soft_deleted_courier_never_reserved(self, pool, make_courier):
        courier = make_courier()
        courier.delete()

        assert pool.reserve_any() is None

    def test_lost_race_moves_to_next_candidate(self, pool, make_courier):
        """A candidate claimed by someone else between pick and update is skipped."""
        taken = make_courier(is_available=False)
        free = make_courier()
        candidates = iter([taken.id, free.id])

        with patch.object(
            CourierDjangoPool, "_pick_candidate", side_effect=lambda: next(candidates)
        ):
            assert pool.reserve_any() == free.id

        taken.refresh_from_db()
        free.refresh_from_db()
        assert taken.is_available is False
        assert free.is_available is False


class TestRelease:
    def test_release_makes_courier_available(self, pool, make_courier):
        courier = make_courier(is_available=False)

        pool.release(courier.id)

        courier.refresh_from_db()
        assert courier.is_available is True

    def test_release_is_idempotent(self, pool, make_courier):
        courier = make_courier()
        pool.reserve_any()

        pool.release(courier.id)
        pool.release(courier.id)

        courier.refresh_from_db()
        assert courier.is_available is True
        assert pool.reserve_any() == courier.id

    def test_release_of_unknown_courier_is_harmless(self, pool):
        pool.release("not-a-uuid")
        assert Courier.objects.count() == 0


class TestRepositoryContract:
    def test_get_by_id(self, pool, make_courier):
        courier = make_courier()
        assert pool.get_by_id(str(courier.id)) == courier

    def test_get_by_invalid_id_returns_none(self, pool):
        assert pool.get_by_id("not-a-uuid") is None

    def test_list_filters(self, pool, make_courier):
        busy = make_courier(is_available=False)
        make_courier()

        assert pool.list({"is_available": False}) == [busy]
