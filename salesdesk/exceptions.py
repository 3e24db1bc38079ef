"""Domain-specific exceptions for the sales tracker core services."""

from __future__ import annotations

from typing import Dict, Mapping, Optional


class ValidationError(ValueError):
    """Raised when submitted data does not meet validation requirements.

    ``errors`` maps each failing field to its message so callers can render
    every problem at once.
    """

    def __init__(self, message: str, errors: Optional[Mapping[str, str]] = None) -> None:
        super().__init__(message)
        self.errors: Dict[str, str] = dict(errors or {})

    @classmethod
    def from_errors(cls, errors: Mapping[str, str]) -> "ValidationError":
        return cls("; ".join(errors.values()), errors)


class RecordNotFoundError(LookupError):
    """Raised when a transaction record cannot be located."""


class PersistenceError(IOError):
    """Raised when the persistence layer cannot complete an operation."""

    retryable = False


class TransientPersistenceError(PersistenceError):
    """Storage was temporarily unavailable; resubmitting may succeed."""

    retryable = True


class PermanentPersistenceError(PersistenceError):
    """Storage rejected the operation; resubmitting unchanged data will fail again."""


class DuplicateRecordError(PermanentPersistenceError):
    """Raised when a record with the same identifier already exists."""
