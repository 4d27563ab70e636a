"""Verification code delivery channels.

The order lifecycle only depends on ``INotificationSender``; the concrete
class is chosen with ``settings.NOTIFICATION_SENDER``:

- ``EmailNotificationSender`` sends the email inline.
- ``QueuedNotificationSender`` hands the email to a Celery worker.

Both raise ``NotificationFailure`` when the channel rejects the message.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from smtplib import SMTPException

import structlog
from django.conf import settings
from django.core.mail import send_mail
from django.template.loader import render_to_string
from django.utils.module_loading import import_string
from kombu.exceptions import OperationalError

from modules.notifications.exceptions import NotificationFailure

logger = structlog.get_logger(__name__)


class INotificationSender(ABC):
    @abstractmethod
    def send(self, destination: str, subject: str, code: str) -> None:
        """Deliver ``code`` to ``destination``.

        Raises:
            NotificationFailure: the channel did not accept the message.
        """


class EmailNotificationSender(INotificationSender):
    def send(self, destination: str, subject: str, code: str) -> None:
        context = {"code": code}
        try:
            send_mail(
                subject=subject,
                message=render_to_string("notifications/verification_code.txt", context),
                from_email=settings.DEFAULT_FROM_EMAIL,
                recipient_list=[destination],
                html_message=render_to_string(
                    "notifications/verification_code.html", context
                ),
            )
        except (SMTPException, OSError) as exc:
            logger.warning("notification.email_failed", error=str(exc))
            raise NotificationFailure(f"Email to {destination} failed: {exc}") from exc

        logger.info("notification.email_sent", subject=subject)


class QueuedNotificationSender(INotificationSender):
    def send(self, destination: str, subject: str, code: str) -> None:
        from modules.notifications.tasks import deliver_verification_code

        try:
            deliver_verification_code.delay(destination, subject, code)
        except OperationalError as exc:
            logger.warning("notification.enqueue_failed", error=str(exc))
            raise NotificationFailure(f"Broker unavailable: {exc}") from exc

        logger.info("notification.enqueued", subject=subject)


def get_notification_sender() -> INotificationSender:
    """Instantiate the sender configured in ``settings.NOTIFICATION_SENDER``."""
    return import_string(settings.NOTIFICATION_SENDER)()
