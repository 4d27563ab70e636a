import time
import uuid
from typing import Callable

import structlog
from django.http import HttpRequest, HttpResponse

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128


def _incoming_request_id(request: HttpRequest) -> str | None:
    value = request.headers.get(REQUEST_ID_HEADER, "").strip()
    if not value or len(value) > MAX_REQUEST_ID_LENGTH:
        return None
    return value


class CorrelationIdMiddleware:
    """Attach a correlation ID to every request and its log lines.

    A well-formed ``X-Request-ID`` from the caller (gateway, mobile app) is
    kept; anything else is replaced with a fresh UUID4. The ID is echoed on
    the response.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        cid = _incoming_request_id(request) or str(uuid.uuid4())

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            correlation_id=cid,
            method=request.method,
            path=request.path,
        )

        started = time.monotonic()
        logger.info("request.started")
        response = self.get_response(request)
        logger.info(
            "request.finished",
            status_code=response.status_code,
            duration_ms=round((time.monotonic() - started) * 1000, 2),
        )

        response[REQUEST_ID_HEADER] = cid
        return response
