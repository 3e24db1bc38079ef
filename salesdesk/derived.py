"""Pure derivations of read-only transaction fields."""

from __future__ import annotations

from datetime import date
from typing import NamedTuple, Optional, Tuple

from .catalog import BRANCH_CODE_LENGTH, BRANCH_REPRESENTATIVES, PRODUCT_CATALOG

__all__ = [
    "ProductFields",
    "derive_branch",
    "derive_month",
    "derive_product_fields",
    "representatives_for",
]


class ProductFields(NamedTuple):
    product: str
    mark: str


def derive_branch(no_pjb: Optional[str]) -> str:
    """Return the upper-cased branch code once ``no_pjb`` has four characters."""
    if not no_pjb:
        return ""
    cleaned = no_pjb.strip()
    if len(cleaned) < BRANCH_CODE_LENGTH:
        return ""
    return cleaned[:BRANCH_CODE_LENGTH].upper()


def derive_month(value: Optional[date]) -> str:
    """Render ``value`` as ``"January 2024"``; empty when no date is chosen."""
    if value is None:
        return ""
    return value.strftime("%B %Y")


def derive_product_fields(product_type: Optional[str]) -> ProductFields:
    details = PRODUCT_CATALOG.get(product_type or "")
    if details is None:
        return ProductFields("", "")
    return ProductFields(details["product"], details["mark"])


def representatives_for(branch: Optional[str]) -> Tuple[str, ...]:
    # An empty tuple disables representative selection.
    return BRANCH_REPRESENTATIVES.get(branch or "", ())
