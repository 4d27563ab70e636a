"""Courier domain exceptions."""

from __future__ import annotations


class CourierNotFound(Exception):
    """The requested courier does not exist or has been soft-deleted."""
