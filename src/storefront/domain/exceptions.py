"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the checkout orchestrator and the CLI layer can catch them uniformly and
display user-friendly messages.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated.

    ``field`` names the offending input (e.g. ``shipping_address.city``)
    when the error is scoped to a single form field.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class InvalidTransition(DomainException):
    """The order's current status does not allow the requested transition."""


class ConcurrencyConflict(DomainException):
    """The order changed since the caller last read it."""


class PaymentError(DomainException):
    """A payment strategy refused to treat the payment as successful."""


class PaymentDeclined(PaymentError):
    """The external payment step could not be completed."""


class PaymentCancelled(PaymentError):
    """The customer rejected or abandoned the payment confirmation."""


class OrderCreationFailed(DomainException):
    """The order service rejected the order payload."""
