"""Delivery verification codes.

A code is the shared secret proving the physical handoff: the customer
receives it out-of-band and reads it to the courier, who submits it to close
the order. Codes are short so a person can type them, which makes them
guessable in bulk; verification attempts are bounded per order instead.
"""

from __future__ import annotations

import secrets

from django.conf import settings


def generate_verification_code(length: int | None = None) -> str:
    """Return a ``length``-digit numeric code without a leading zero.

    Drawn uniformly from ``[10**(length-1), 10**length)`` with the ``secrets``
    CSPRNG. ``length`` defaults to ``settings.ORDER_VERIFICATION_CODE_LENGTH``.
    """
    if length is None:
        length = settings.ORDER_VERIFICATION_CODE_LENGTH
    if length < 1:
        raise ValueError("Verification code length must be at least 1.")

    low = 10 ** (length - 1)
    return str(low + secrets.randbelow(10**length - low))
