"""Notification exceptions."""

from __future__ import annotations


class NotificationFailure(Exception):
    """A verification code could not be handed to the delivery channel."""
