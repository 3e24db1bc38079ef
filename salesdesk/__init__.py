"""Core business logic package for the sales tracker."""

from .exceptions import (
    DuplicateRecordError,
    PermanentPersistenceError,
    PersistenceError,
    RecordNotFoundError,
    TransientPersistenceError,
    ValidationError,
)
from .entry_form import FormState, validate
from .list_view import FilterState, apply_filters, export_csv, format_currency
from .models import ItemDetail, TransactionRecord
from .services import TransactionService
from .storage import JSONStorage

__all__ = [
    "DuplicateRecordError",
    "FilterState",
    "FormState",
    "ItemDetail",
    "JSONStorage",
    "PermanentPersistenceError",
    "PersistenceError",
    "RecordNotFoundError",
    "TransactionRecord",
    "TransactionService",
    "TransientPersistenceError",
    "ValidationError",
    "apply_filters",
    "export_csv",
    "format_currency",
    "validate",
]
