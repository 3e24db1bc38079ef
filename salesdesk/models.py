"""Data models for the sales tracker domain."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Tuple

from .derived import derive_branch, derive_month, derive_product_fields

__all__ = [
    "ItemDetail",
    "TransactionRecord",
    "format_plain_decimal",
    "isoformat_utc",
    "parse_datetime",
]


def isoformat_utc(dt: datetime) -> str:
    """Return an ISO 8601 string with trailing Z for UTC-aware datetimes."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    iso = dt.isoformat(timespec="seconds")
    # datetime.isoformat renders +00:00 for UTC; replace with the shorter Z form.
    return iso.replace("+00:00", "Z")


def parse_datetime(value: str) -> datetime:
    """Parse ISO 8601 datetime strings with optional trailing Z into UTC-aware datetime."""
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        # Naive timestamps are treated as UTC.
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_plain_decimal(value: Decimal) -> str:
    """Render a decimal without exponent or trailing zeros (``50000000``, ``12.5``)."""
    if value == value.to_integral_value():
        return format(value.to_integral_value(), "f")
    return format(value.normalize(), "f")


@dataclass(frozen=True)
class ItemDetail:
    """Marking and serial numbers for one unit of a transaction."""

    marking: str = ""
    serial_number: str = ""
    sn_engine: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            "marking": self.marking,
            "serialNumber": self.serial_number,
            "snEngine": self.sn_engine,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ItemDetail":
        return cls(
            marking=data.get("marking") or "",
            serial_number=data.get("serialNumber") or "",
            sn_engine=data.get("snEngine") or "",
        )


@dataclass(frozen=True)
class TransactionRecord:
    id: str
    time_stamp: datetime
    date: date
    no_pjb: str
    customer_name: str
    customer_classification: str
    quantity: int
    product_type: str
    hpp: Decimal
    payment_scheme: str
    sales_representative: str
    dynamic_fields: Tuple[ItemDetail, ...] = field(default_factory=tuple)

    # Derived fields are computed on read so they can never go stale.
    @property
    def month(self) -> str:
        return derive_month(self.date)

    @property
    def branch(self) -> str:
        return derive_branch(self.no_pjb)

    @property
    def product(self) -> str:
        return derive_product_fields(self.product_type).product

    @property
    def mark(self) -> str:
        return derive_product_fields(self.product_type).mark

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the record to JSON-friendly natives, derived fields included."""
        return {
            "id": self.id,
            "timeStamp": isoformat_utc(self.time_stamp),
            "month": self.month,
            "date": self.date.isoformat(),
            "branch": self.branch,
            "noPJB": self.no_pjb,
            "customerName": self.customer_name,
            "customerClassification": self.customer_classification,
            "quantity": self.quantity,
            "productType": self.product_type,
            "product": self.product,
            "mark": self.mark,
            "hpp": format_plain_decimal(self.hpp),
            "paymentScheme": self.payment_scheme,
            "salesRepresentative": self.sales_representative,
            "dynamicFields": [item.to_dict() for item in self.dynamic_fields],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TransactionRecord":
        """Hydrate a record from JSON-native data; derived keys are ignored."""
        return cls(
            id=str(data["id"]),
            time_stamp=parse_datetime(data["timeStamp"]),
            date=date.fromisoformat(data["date"]),
            no_pjb=data["noPJB"],
            customer_name=data["customerName"],
            customer_classification=data["customerClassification"],
            quantity=int(data["quantity"]),
            product_type=data["productType"],
            hpp=Decimal(str(data["hpp"])),
            payment_scheme=data["paymentScheme"],
            sales_representative=data["salesRepresentative"],
            dynamic_fields=tuple(
                ItemDetail.from_dict(item) for item in data.get("dynamicFields", [])
            ),
        )
