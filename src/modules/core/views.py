import time
from typing import Any, Callable, Dict

import structlog
from django.core.cache import cache
from django.db import connections
from django.http import HttpRequest, JsonResponse
from django.utils import timezone
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

logger = structlog.get_logger(__name__)


def _check_database() -> None:
    conn = connections["default"]
    conn.ensure_connection()
    with conn.cursor() as cursor:
        cursor.execute("SELECT 1")
        cursor.fetchone()


def _check_cache() -> None:
    cache.set("_health_check", "ok", 10)
    if cache.get("_health_check") != "ok":
        raise ConnectionError("Cache read failed")


HEALTH_PROBES: Dict[str, Callable[[], None]] = {
    "database": _check_database,
    "cache": _check_cache,
}


def _run_probe(name: str, probe: Callable[[], None]) -> Dict[str, Any]:
    start = time.monotonic()
    try:
        probe()
    except Exception as exc:
        logger.error("health_check.probe_failed", service=name, error=str(exc))
        return {"status": "down"}
    return {
        "status": "up",
        "response_time_ms": round((time.monotonic() - start) * 1000, 2),
    }


def health_check(request: HttpRequest) -> JsonResponse:
    """Public liveness probe; 503 when any backing service is down."""
    services = {name: _run_probe(name, probe) for name, probe in HEALTH_PROBES.items()}
    healthy = all(service["status"] == "up" for service in services.values())
    status = "healthy" if healthy else "unhealthy"

    logger.info("health_check.completed", status=status)
    return JsonResponse(
        {
            "status": status,
            "timestamp": timezone.now().isoformat(),
            "services": services,
        },
        status=200 if healthy else 503,
    )


class CurrentUserView(APIView):
    """Return the identity of the authenticated caller.

    ``courier_id`` is set when the user is linked to a courier profile.
    """

    permission_classes = [IsAuthenticated]

    def get(self, request: Request) -> Response:
        user = request.user
        courier = getattr(user, "courier_profile", None)
        return Response(
            {
                "id": user.pk,
                "username": user.get_username(),
                "email": user.email,
                "is_staff": user.is_staff,
                "courier_id": str(courier.id) if courier else None,
            }
        )
