"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class InvalidQuantityError(ValidationError):
    """A zero, negative or non-integer quantity was supplied."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""

    def __init__(self, message: str, item_id: str | None = None) -> None:
        super().__init__(message)
        self.item_id = item_id


class InsufficientStockError(ValidationError):
    """Requested quantity exceeds the stock currently on hand."""

    def __init__(
        self, item_id: str, item_name: str, required: int, available: int
    ) -> None:
        super().__init__(
            f"Insufficient stock for {item_name}. "
            f"Available: {available}, Required: {required}"
        )
        self.item_id = item_id
        self.item_name = item_name
        self.required = required
        self.available = available


class DuplicateReservationError(ValidationError):
    """The order already holds a reservation on this item."""


class ReservationNotFoundError(ValidationError):
    """No reserved entry exists for the order on this item."""


class ReservationMismatchError(ValidationError):
    """Consumed quantity differs from the quantity that was reserved."""


class ConcurrencyConflictError(DomainException):
    """An item changed in the store after it was read."""

    def __init__(self, item_id: str, expected: int, actual: int) -> None:
        super().__init__(
            f"Item '{item_id}' was modified concurrently "
            f"(expected version {expected}, found {actual})"
        )
        self.item_id = item_id
        self.expected = expected
        self.actual = actual


class StoreBusyError(DomainException):
    """The item store stayed locked by another writer past the timeout."""


class PartialBatchFailureError(DomainException):
    """A batch was partly applied and could not be rolled back.

    Needs manual reconciliation: ``applied_ids`` lists the items left
    mutated, ``failed_id`` the item whose write failed.
    """

    def __init__(
        self, applied_ids: list[str], failed_id: str, cause: Exception
    ) -> None:
        super().__init__(
            f"Batch update failed at item '{failed_id}' and could not be "
            f"rolled back; items left modified: {', '.join(applied_ids)}"
        )
        self.applied_ids = list(applied_ids)
        self.failed_id = failed_id
        self.cause = cause
