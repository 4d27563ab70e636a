"""Domain event primitives shared by every bounded context.

Aggregates queue events while a use case runs; the repository drains the
queue when it saves the aggregate and turns each event into an outbox row.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4


@dataclass(frozen=True)
class DomainEvent:
    """Immutable fact about an aggregate.

    ``event_name`` is the concrete class name; it becomes the outbox
    ``event_type``.
    """

    aggregate_id: UUID
    event_id: UUID = field(default_factory=uuid4)
    occurred_on: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    event_name: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "event_name", type(self).__name__)

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready representation: UUIDs, decimals and datetimes as strings."""
        return _jsonable(asdict(self))


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    return value


class DomainEventMixin:
    """Event queue for aggregate roots.

    Django builds model instances without calling ``__init__`` on mixins, so
    the queue is created on first use.
    """

    def _event_queue(self) -> list[DomainEvent]:
        queue = self.__dict__.get("_pending_events")
        if queue is None:
            queue = self.__dict__["_pending_events"] = []
        return queue

    def add_domain_event(self, event: DomainEvent) -> None:
        self._event_queue().append(event)

    @property
    def domain_events(self) -> list[DomainEvent]:
        return list(self._event_queue())

    def pull_domain_events(self) -> list[DomainEvent]:
        """Return the queued events and empty the queue."""
        queue = self._event_queue()
        events = list(queue)
        queue.clear()
        return events
