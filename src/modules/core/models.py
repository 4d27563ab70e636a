"""Abstract base models and the transactional outbox.

Every table keys on a UUIDv7 so rows sort by insertion time. Restaurants,
foods, couriers and orders are never removed physically: ``delete()``
stamps ``deleted_at`` and reads go through ``.alive()``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import uuid6
from django.db import models
from django.utils import timezone

if TYPE_CHECKING:
    from shared.domain.events import DomainEvent


class BaseModel(models.Model):
    """UUIDv7 primary key plus creation / modification stamps."""

    id = models.UUIDField(primary_key=True, default=uuid6.uuid7, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def save(self, *args, **kwargs) -> None:
        # auto_now is skipped for partial saves unless the field is listed
        fields = kwargs.get("update_fields")
        if fields is not None and "updated_at" not in fields:
            kwargs["update_fields"] = [*fields, "updated_at"]
        super().save(*args, **kwargs)


class SoftDeleteQuerySet(models.QuerySet):
    def alive(self) -> SoftDeleteQuerySet:
        return self.filter(deleted_at__isnull=True)

    def delete(self) -> tuple[int, dict[str, int]]:
        stamp = timezone.now()
        count = self.alive().update(deleted_at=stamp, updated_at=stamp)
        return count, {self.model._meta.label: count}


class SoftDeleteModel(BaseModel):
    """Row hidden from ``.alive()`` once ``deleted_at`` is set.

    ``objects`` is unfiltered so admin screens and history joins still see
    retired couriers and delisted foods.
    """

    deleted_at = models.DateTimeField(null=True, blank=True, default=None, db_index=True)

    objects = SoftDeleteQuerySet.as_manager()

    class Meta:
        abstract = True

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def delete(self, using=None, keep_parents=False) -> tuple[int, dict[str, int]]:
        if self.is_deleted:
            return 0, {}
        self.deleted_at = timezone.now()
        self.save(update_fields=["deleted_at"])
        return 1, {self._meta.label: 1}


class EventStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    PUBLISHED = "PUBLISHED", "Published"
    FAILED = "FAILED", "Failed"


class OutboxQuerySet(models.QuerySet):
    def relayable(self, max_retries: int) -> OutboxQuerySet:
        """Rows the relay should (re)try, oldest first."""
        return self.filter(
            models.Q(status=EventStatus.PENDING)
            | models.Q(status=EventStatus.FAILED, retry_count__lt=max_retries)
        ).order_by("created_at")


class OutboxEvent(BaseModel):
    """Domain event stored in the same transaction as the order it describes.

    ``core.relay_outbox_events`` publishes the row later and flips it to
    ``PUBLISHED``; a failed publish leaves it ``FAILED`` with the error and
    a bumped ``retry_count``.
    """

    event_type = models.CharField(max_length=100)
    aggregate_id = models.CharField(max_length=255, db_index=True)
    topic = models.CharField(max_length=100)
    payload = models.JSONField()
    status = models.CharField(
        max_length=20, choices=EventStatus.choices, default=EventStatus.PENDING
    )
    retry_count = models.PositiveIntegerField(default=0)
    error_message = models.TextField(null=True, blank=True, default=None)  # noqa: DJ01
    processed_at = models.DateTimeField(null=True, blank=True, default=None)

    objects = OutboxQuerySet.as_manager()

    class Meta:
        db_table = "outbox_events"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="outbox_relay_idx"),
        ]

    @classmethod
    def record(cls, event: DomainEvent, topic: str) -> OutboxEvent:
        """Queue ``event`` for relay; call inside the aggregate's transaction."""
        return cls.objects.create(
            event_type=event.event_name,
            aggregate_id=str(event.aggregate_id),
            payload=event.to_payload(),
            topic=topic,
        )

    def mark_as_published(self) -> None:
        self.status = EventStatus.PUBLISHED
        self.processed_at = timezone.now()
        self.save(update_fields=["status", "processed_at"])

    def mark_as_failed(self, error: str) -> None:
        self.status = EventStatus.FAILED
        self.error_message = error
        self.retry_count = models.F("retry_count") + 1
        self.save(update_fields=["status", "error_message", "retry_count"])
        self.refresh_from_db(fields=["retry_count"])

    def __str__(self) -> str:
        return f"{self.topic}:{self.event_type} {self.aggregate_id} [{self.status}]"
