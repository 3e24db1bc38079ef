"""Validation helpers shared across sales tracker services.

Each helper validates one field and raises ``ValidationError`` with a
message meant to be shown next to that field.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from .catalog import MAX_HPP_EXPONENT, MAX_QUANTITY
from .exceptions import ValidationError
from .models import parse_datetime


def validate_required_str(
    value: object,
    label: str,
    max_length: int,
    *,
    min_length: int = 1,
) -> str:
    if value is None:
        raise ValidationError(f"{label} is required")
    if not isinstance(value, str):
        raise ValidationError(f"{label} must be a string")
    trimmed = value.strip()
    if not trimmed:
        raise ValidationError(f"{label} is required")
    if len(trimmed) < min_length:
        raise ValidationError(f"{label} must be at least {min_length} characters")
    if len(trimmed) > max_length:
        raise ValidationError(f"{label} must be at most {max_length} characters")
    return trimmed


def validate_optional_str(value: object, label: str, max_length: int) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{label} must be a string")
    trimmed = value.strip()
    if len(trimmed) > max_length:
        raise ValidationError(f"{label} must be at most {max_length} characters")
    return trimmed


def validate_enum(value: object, label: str, allowed: Iterable[str]) -> str:
    allowed = tuple(allowed)
    if value is None or value == "":
        raise ValidationError(f"{label} is required")
    if not isinstance(value, str):
        raise ValidationError(f"{label} must be a string")
    canonical = value.strip().lower()
    if canonical not in allowed:
        raise ValidationError(f"{label} must be one of: {', '.join(allowed)}")
    return canonical


def validate_choice(value: str, label: str, allowed: Iterable[str], scope: str) -> str:
    """Ensure an already-validated ``value`` belongs to the choices for ``scope``."""
    if value not in tuple(allowed):
        raise ValidationError(f"{label} '{value}' is not available for {scope}")
    return value


def validate_calendar_date(value: object, label: str) -> date:
    """Accept a ``date``, a ``datetime`` or an ISO 8601 date/datetime string."""
    if value is None or value == "":
        raise ValidationError(f"{label} is required")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"{label} must be an ISO 8601 date")
    text = value.strip()
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        # Browsers send picked dates as full ISO timestamps.
        return parse_datetime(text).date()
    except ValueError as exc:
        raise ValidationError(f"{label} must be a valid date (YYYY-MM-DD)") from exc


def parse_quantity(raw: object, label: str) -> int:
    if raw is None or raw == "":
        raise ValidationError(f"{label} is required")
    if isinstance(raw, bool):
        raise ValidationError(f"{label} must be a whole number")
    try:
        quantity = int(str(raw).strip())
    except ValueError as exc:
        raise ValidationError(f"{label} must be a whole number") from exc
    if quantity < 1:
        raise ValidationError(f"{label} must be at least 1")
    if quantity > MAX_QUANTITY:
        raise ValidationError(f"{label} must be at most {MAX_QUANTITY}")
    return quantity


def parse_hpp(raw: object, label: str) -> Decimal:
    """Convert raw input to a non-negative Decimal."""
    if raw is None or raw == "":
        raise ValidationError(f"{label} is required")
    if isinstance(raw, bool):
        raise ValidationError(f"{label} must be a number")
    try:
        amount = Decimal(str(raw).strip())
    except (InvalidOperation, TypeError) as exc:
        raise ValidationError(f"{label} must be a number") from exc
    if not amount.is_finite():
        raise ValidationError(f"{label} must be a number")
    if amount < 0:
        raise ValidationError(f"{label} must be a positive number")
    if amount and amount.adjusted() > MAX_HPP_EXPONENT:
        raise ValidationError(f"{label} is too large")
    return amount


def optional_text(value: Optional[object]) -> str:
    """Coerce a loosely-typed form value to a string for state snapshots."""
    if value is None:
        return ""
    return str(value)
