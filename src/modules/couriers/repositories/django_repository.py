"""Django ORM implementation of the courier pool.

Reservation is a conditional ``UPDATE ... WHERE is_available`` executed
against a candidate picked under ``SELECT FOR UPDATE SKIP LOCKED``. On
backends with row locks the candidate is already ours when the update runs;
on backends without them (SQLite) the conditional update is the
compare-and-set, and a lost race moves on to the next candidate.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from modules.couriers.models import Courier
from modules.couriers.repositories.interfaces import ICourierPool

logger = structlog.get_logger(__name__)


class CourierDjangoPool(ICourierPool):
    """Courier pool backed by the ``couriers`` table."""

    # ------------------------------------------------------------------
    # Reservation
    # ------------------------------------------------------------------

    def reserve_any(self) -> Optional[UUID]:
        while True:
            with transaction.atomic():
                candidate_id = self._pick_candidate()
                if candidate_id is None:
                    logger.warning("courier.pool_exhausted")
                    return None

                claimed = (
                    Courier.objects.alive()
                    .filter(pk=candidate_id, is_available=True)
                    .update(is_available=False, updated_at=timezone.now())
                )
            if claimed:
                logger.info("courier.reserved", courier_id=str(candidate_id))
                return candidate_id

            logger.info("courier.reservation_race_lost", courier_id=str(candidate_id))

    def release(self, courier_id: UUID) -> None:
        try:
            released = Courier.objects.filter(
                pk=courier_id, is_available=False
            ).update(is_available=True, updated_at=timezone.now())
        except (ValueError, ValidationError):
            released = 0

        if released:
            logger.info("courier.released", courier_id=str(courier_id))
        else:
            logger.info("courier.release_noop", courier_id=str(courier_id))

    @staticmethod
    def _pick_candidate() -> Optional[UUID]:
        """Least recently assigned available courier, skipping locked rows."""
        return (
            Courier.objects.alive()
            .select_for_update(skip_locked=True)
            .filter(is_available=True)
            .order_by("updated_at")
            .values_list("pk", flat=True)
            .first()
        )

    # ------------------------------------------------------------------
    # Repository contract
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Courier]:
        try:
            return Courier.objects.alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Courier]:
        queryset = Courier.objects.alive()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def save(self, entity: Courier) -> Courier:
        entity.save()
        logger.info("courier.saved", courier_id=str(entity.id))
        return entity
