"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so component boundaries can catch them uniformly and turn them into
structured results or user-friendly messages.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated.

    ``field_errors`` maps a field path (e.g. ``products[0].productId``) to
    a message when the violation can be pinned to individual inputs.
    """

    def __init__(self, message: str, field_errors: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.field_errors = dict(field_errors or {})


class CorruptCartError(DomainException):
    """A persisted cart record could not be parsed."""


class InvalidCallbackError(DomainException):
    """A payment gateway response could not be decoded."""


class CorruptLedgerError(DomainException):
    """The record of applied payment transactions could not be read."""
