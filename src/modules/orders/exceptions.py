"""Order domain exceptions.

Raised by the service layer; the API layer translates them into HTTP
responses. None of them leaves partial state behind.
"""

from __future__ import annotations


class PaymentNotConfirmed(Exception):
    """The payment record does not carry the confirmed status."""


class ItemNotFound(Exception):
    """A line item references a food that cannot be priced."""


class NoCourierAvailable(Exception):
    """Every courier is busy; no order was created."""


class PersistenceFailure(Exception):
    """The order could not be stored; the reserved courier was released.

    Retriable by the caller.
    """


class OrderNotFound(Exception):
    """The requested order does not exist or has been soft-deleted."""


class InvalidCode(Exception):
    """The submitted delivery code does not match the order."""


class VerificationLocked(InvalidCode):
    """Too many wrong codes were submitted for the order."""


class InvalidOrderStatus(Exception):
    """The requested status transition is not allowed."""
