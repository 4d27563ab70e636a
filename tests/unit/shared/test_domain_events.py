"""Unit tests for the domain event primitives."""

from __future__ import annotations

from uuid import uuid4

import pytest

from modules.core.models import EventStatus, OutboxEvent
from modules.orders.events import OrderPlaced, OrderStatusChanged
from modules.orders.models import Order

pytestmark = pytest.mark.unit


class TestDomainEvent:
    def test_event_name_is_class_name(self):
        assert OrderPlaced(aggregate_id=uuid4()).event_name == "OrderPlaced"

    def test_payload_is_json_ready(self):
        order_id, courier_id = uuid4(), uuid4()
        payload = OrderPlaced(aggregate_id=order_id, courier_id=courier_id).to_payload()

        assert payload["aggregate_id"] == str(order_id)
        assert payload["courier_id"] == str(courier_id)
        assert isinstance(payload["occurred_on"], str)

    def test_events_are_immutable(self):
        event = OrderStatusChanged(aggregate_id=uuid4(), old_status="pending")
        with pytest.raises(AttributeError):
            event.old_status = "delivered"


class TestDomainEventMixin:
    def test_pull_drains_queue(self):
        order = Order()
        order.add_domain_event(OrderPlaced(aggregate_id=uuid4()))

        assert len(order.domain_events) == 1
        assert len(order.pull_domain_events()) == 1
        assert order.domain_events == []

    def test_new_instance_has_empty_queue(self):
        assert Order().pull_domain_events() == []


def test_outbox_record_stores_event():
    event = OrderStatusChanged(
        aggregate_id=uuid4(), old_status="pending", new_status="preparing"
    )

    row = OutboxEvent.record(event, topic="orders")

    assert row.status == EventStatus.PENDING
    assert row.event_type == "OrderStatusChanged"
    assert row.payload["new_status"] == "preparing"
