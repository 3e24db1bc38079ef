"""Entry form logic: derived fields, quantity handling and validation.

Everything here is pure. ``FormState`` is an immutable snapshot of the
form; every transition returns a new snapshot, and the read-only fields
(branch, month, product, mark, representative choices) are computed from
the snapshot instead of being stored next to it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple
from uuid import uuid4

from .catalog import CUSTOMER_CLASSIFICATIONS, MAX_QUANTITY
from .derived import (
    ProductFields,
    derive_branch,
    derive_month,
    derive_product_fields,
    representatives_for,
)
from .exceptions import ValidationError
from .models import ItemDetail, TransactionRecord
from .validators import (
    optional_text,
    parse_hpp,
    parse_quantity,
    validate_calendar_date,
    validate_choice,
    validate_enum,
    validate_optional_str,
    validate_required_str,
)

__all__ = [
    "BLANK_ITEM",
    "FormState",
    "ProductFields",
    "ValidatedEntry",
    "assemble_record",
    "clamp_quantity",
    "derive_branch",
    "derive_month",
    "derive_product_fields",
    "field_errors",
    "representatives_for",
    "resize_dynamic_fields",
    "validate",
]

BLANK_ITEM = ItemDetail()

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

_ITEM_KEYS = {
    "marking": "marking",
    "serialNumber": "serial_number",
    "snEngine": "sn_engine",
}


def clamp_quantity(raw: object) -> int:
    """Parse a typed quantity like a number input does; kept within 1..MAX_QUANTITY."""
    if isinstance(raw, bool):
        return 1
    if isinstance(raw, int):
        return min(MAX_QUANTITY, max(1, raw))
    match = _LEADING_INT.match(str(raw)) if raw is not None else None
    if match is None:
        return 1
    digits = match.group(1)
    if len(digits.lstrip("+-").lstrip("0")) > len(str(MAX_QUANTITY)):
        return 1 if digits.startswith("-") else MAX_QUANTITY
    return min(MAX_QUANTITY, max(1, int(digits)))


def resize_dynamic_fields(
    current: Sequence[ItemDetail], new_quantity: int
) -> Tuple[ItemDetail, ...]:
    """Return exactly ``new_quantity`` items, keeping existing ones by index."""
    quantity = min(MAX_QUANTITY, max(1, int(new_quantity)))
    kept = tuple(current[:quantity])
    return kept + (BLANK_ITEM,) * (quantity - len(kept))


@dataclass(frozen=True)
class ValidatedEntry:
    date: date
    no_pjb: str
    customer_name: str
    customer_classification: str
    quantity: int
    product_type: str
    hpp: Decimal
    payment_scheme: str
    sales_representative: str
    dynamic_fields: Tuple[ItemDetail, ...]


def validate(payload: Mapping[str, Any]) -> ValidatedEntry:
    """Validate a submitted form payload, reporting every failing field together."""
    errors: Dict[str, str] = {}
    values: Dict[str, Any] = {}

    def check(name: str, func, *args: Any, **kwargs: Any) -> None:
        try:
            values[name] = func(payload.get(name), *args, **kwargs)
        except ValidationError as exc:
            errors[name] = str(exc)

    check("date", validate_calendar_date, "Date")
    check("noPJB", validate_required_str, "No. PJB", 50, min_length=4)
    check(
        "customerClassification",
        validate_enum,
        "Customer classification",
        CUSTOMER_CLASSIFICATIONS,
    )
    check("customerName", validate_required_str, "Customer name", 200)
    check("quantity", parse_quantity, "Quantity")
    check("productType", validate_required_str, "Product type", 100)
    check("hpp", parse_hpp, "HPP")
    check("paymentScheme", validate_required_str, "Payment scheme", 100)
    check("salesRepresentative", validate_required_str, "Sales representative", 100)

    if "salesRepresentative" in values and "noPJB" in values:
        branch = derive_branch(values["noPJB"])
        try:
            validate_choice(
                values["salesRepresentative"],
                "Sales representative",
                representatives_for(branch),
                f"branch {branch}",
            )
        except ValidationError as exc:
            errors["salesRepresentative"] = str(exc)

    items = _validate_items(payload.get("dynamicFields"), errors)

    if errors:
        raise ValidationError.from_errors(errors)

    return ValidatedEntry(
        date=values["date"],
        no_pjb=values["noPJB"],
        customer_name=values["customerName"],
        customer_classification=values["customerClassification"],
        quantity=values["quantity"],
        product_type=values["productType"],
        hpp=values["hpp"],
        payment_scheme=values["paymentScheme"],
        sales_representative=values["salesRepresentative"],
        dynamic_fields=resize_dynamic_fields(items, values["quantity"]),
    )


def field_errors(payload: Mapping[str, Any]) -> Dict[str, str]:
    """Return the per-field messages for ``payload``; empty when it is valid."""
    try:
        validate(payload)
    except ValidationError as exc:
        return exc.errors
    return {}


def assemble_record(
    entry: ValidatedEntry,
    *,
    timestamp: Optional[datetime] = None,
    record_id: Optional[str] = None,
) -> TransactionRecord:
    return TransactionRecord(
        id=record_id or str(uuid4()),
        time_stamp=timestamp or datetime.now(timezone.utc),
        date=entry.date,
        no_pjb=entry.no_pjb,
        customer_name=entry.customer_name,
        customer_classification=entry.customer_classification,
        quantity=entry.quantity,
        product_type=entry.product_type,
        hpp=entry.hpp,
        payment_scheme=entry.payment_scheme,
        sales_representative=entry.sales_representative,
        dynamic_fields=entry.dynamic_fields,
    )


def _validate_items(raw: object, errors: Dict[str, str]) -> Tuple[ItemDetail, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, (list, tuple)):
        errors["dynamicFields"] = "Product details must be a list"
        return ()
    items = []
    for index, entry in enumerate(raw):
        if isinstance(entry, ItemDetail):
            items.append(entry)
            continue
        if not isinstance(entry, Mapping):
            errors[f"dynamicFields[{index}]"] = f"Item {index + 1} must be an object"
            items.append(BLANK_ITEM)
            continue
        cleaned: Dict[str, str] = {}
        for key, attr in _ITEM_KEYS.items():
            try:
                cleaned[attr] = validate_optional_str(entry.get(key), key, 100)
            except ValidationError as exc:
                errors[f"dynamicFields[{index}].{key}"] = f"Item {index + 1}: {exc}"
        items.append(ItemDetail(**cleaned))
    return tuple(items)


@dataclass(frozen=True)
class FormState:
    """Serialisable snapshot of the entry form."""

    date: Optional[date] = None
    no_pjb: str = ""
    customer_classification: str = ""
    customer_name: str = ""
    quantity: int = 1
    product_type: str = ""
    hpp: str = ""
    payment_scheme: str = ""
    sales_representative: str = ""
    dynamic_fields: Tuple[ItemDetail, ...] = (BLANK_ITEM,)

    # Derived, read-only ---------------------------------------------------
    @property
    def branch(self) -> str:
        return derive_branch(self.no_pjb)

    @property
    def month(self) -> str:
        return derive_month(self.date)

    @property
    def product(self) -> str:
        return derive_product_fields(self.product_type).product

    @property
    def mark(self) -> str:
        return derive_product_fields(self.product_type).mark

    @property
    def representative_choices(self) -> Tuple[str, ...]:
        return representatives_for(self.branch)

    @property
    def representative_enabled(self) -> bool:
        return bool(self.representative_choices)

    # Transitions ----------------------------------------------------------
    def with_no_pjb(self, value: str) -> "FormState":
        updated = replace(self, no_pjb=value or "")
        # A representative picked for the previous branch is cleared once it
        # is no longer among the candidates.
        if (
            updated.sales_representative
            and updated.sales_representative not in updated.representative_choices
        ):
            updated = replace(updated, sales_representative="")
        return updated

    def with_date(self, value: object) -> "FormState":
        if value is None or value == "":
            return replace(self, date=None)
        try:
            parsed = validate_calendar_date(value, "Date")
        except ValidationError as exc:
            raise ValidationError(str(exc), {"date": str(exc)}) from exc
        return replace(self, date=parsed)

    def with_product_type(self, value: str) -> "FormState":
        return replace(self, product_type=value or "")

    def with_quantity(self, raw: object) -> "FormState":
        quantity = clamp_quantity(raw)
        return replace(
            self,
            quantity=quantity,
            dynamic_fields=resize_dynamic_fields(self.dynamic_fields, quantity),
        )

    def increment_quantity(self) -> "FormState":
        return self.with_quantity(self.quantity + 1)

    def decrement_quantity(self) -> "FormState":
        if self.quantity <= 1:
            return self
        return self.with_quantity(self.quantity - 1)

    def with_item(self, index: int, **changes: str) -> "FormState":
        if not 0 <= index < len(self.dynamic_fields):
            raise IndexError(f"Item {index + 1} does not exist (quantity is {self.quantity})")
        items = list(self.dynamic_fields)
        items[index] = replace(items[index], **changes)
        return replace(self, dynamic_fields=tuple(items))

    def with_sales_representative(self, name: str) -> "FormState":
        if not name:
            return replace(self, sales_representative="")
        if not self.representative_enabled:
            raise ValidationError(
                "Enter No. PJB first",
                {"salesRepresentative": "Enter No. PJB first"},
            )
        try:
            validate_choice(
                name, "Sales representative", self.representative_choices, f"branch {self.branch}"
            )
        except ValidationError as exc:
            raise ValidationError(str(exc), {"salesRepresentative": str(exc)}) from exc
        return replace(self, sales_representative=name)

    def with_field(self, name: str, value: object) -> "FormState":
        """Apply a change keyed by its wire name, routing derived-field sources."""
        if name == "noPJB":
            return self.with_no_pjb(optional_text(value))
        if name == "date":
            return self.with_date(value)
        if name == "productType":
            return self.with_product_type(optional_text(value))
        if name == "quantity":
            return self.with_quantity(value)
        if name == "salesRepresentative":
            return self.with_sales_representative(optional_text(value))
        attr = _SIMPLE_FIELDS.get(name)
        if attr is None:
            raise KeyError(f"Unknown form field: {name}")
        return replace(self, **{attr: optional_text(value)})

    def reset(self) -> "FormState":
        return FormState()

    # Serialisation --------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat() if self.date else None,
            "month": self.month,
            "noPJB": self.no_pjb,
            "branch": self.branch,
            "customerClassification": self.customer_classification,
            "customerName": self.customer_name,
            "quantity": self.quantity,
            "productType": self.product_type,
            "product": self.product,
            "mark": self.mark,
            "hpp": self.hpp,
            "paymentScheme": self.payment_scheme,
            "salesRepresentative": self.sales_representative,
            "representativeChoices": list(self.representative_choices),
            "representativeEnabled": self.representative_enabled,
            "dynamicFields": [item.to_dict() for item in self.dynamic_fields],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FormState":
        """Build a state leniently: unparseable dates and stale picks are dropped."""
        try:
            picked = validate_calendar_date(data.get("date"), "Date")
        except ValidationError:
            picked = None
        raw_items = data.get("dynamicFields")
        items = tuple(
            ItemDetail.from_dict(item) if isinstance(item, Mapping) else BLANK_ITEM
            for item in (raw_items if isinstance(raw_items, (list, tuple)) else ())
        )
        quantity = clamp_quantity(data.get("quantity", 1))
        state = cls(
            date=picked,
            no_pjb=optional_text(data.get("noPJB")),
            customer_classification=optional_text(data.get("customerClassification")),
            customer_name=optional_text(data.get("customerName")),
            quantity=quantity,
            product_type=optional_text(data.get("productType")),
            hpp=optional_text(data.get("hpp")),
            payment_scheme=optional_text(data.get("paymentScheme")),
            dynamic_fields=resize_dynamic_fields(items, quantity),
        )
        representative = optional_text(data.get("salesRepresentative"))
        if representative in state.representative_choices:
            state = replace(state, sales_representative=representative)
        return state

    def validate(self) -> ValidatedEntry:
        return validate(self.to_dict())


_SIMPLE_FIELDS = {
    "customerClassification": "customer_classification",
    "customerName": "customer_name",
    "hpp": "hpp",
    "paymentScheme": "payment_scheme",
}
