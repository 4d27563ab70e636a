"""Asynchronous notification delivery."""

import structlog
from celery import shared_task

from modules.notifications.exceptions import NotificationFailure
from modules.notifications.senders import EmailNotificationSender

logger = structlog.get_logger(__name__)


@shared_task(
    name="notifications.deliver_verification_code",
    autoretry_for=(NotificationFailure,),
    retry_backoff=True,
    max_retries=3,
)
def deliver_verification_code(destination: str, subject: str, code: str) -> dict:
    EmailNotificationSender().send(destination, subject, code)
    logger.info("notification.delivered", subject=subject)
    return {"status": "sent"}
