"""List view logic: search, filters, CSV export and display helpers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from .exceptions import ValidationError
from .models import TransactionRecord, format_plain_decimal, isoformat_utc

ALL = "all"

CSV_MIME_TYPE = "text/csv"

# (header label, value getter, always quoted)
# Built by hand: csv.writer has no per-column always-quote option.
CSV_COLUMNS = (
    ("Time Stamp", lambda r: isoformat_utc(r.time_stamp), False),
    ("Month", lambda r: r.month, False),
    ("Date", lambda r: r.date.isoformat(), False),
    ("Branch", lambda r: r.branch, False),
    ("No. PJB", lambda r: r.no_pjb, False),
    ("Customer Name", lambda r: r.customer_name, True),
    ("Customer Classification", lambda r: r.customer_classification, False),
    ("Quantity", lambda r: str(r.quantity), False),
    ("Product Type", lambda r: r.product_type, True),
    ("Product", lambda r: r.product, True),
    ("Mark", lambda r: r.mark, True),
    ("HPP (Rp)", lambda r: format_plain_decimal(r.hpp), False),
    ("Payment Scheme", lambda r: r.payment_scheme, True),
    ("Sales Representative", lambda r: r.sales_representative, True),
)

FILTER_FIELDS: Dict[str, Callable[[TransactionRecord], str]] = {
    "branch": lambda r: r.branch,
    "month": lambda r: r.month,
    "customerClassification": lambda r: r.customer_classification,
}

_SEARCH_FIELDS: Sequence[Callable[[TransactionRecord], str]] = (
    lambda r: r.customer_name,
    lambda r: r.no_pjb,
    lambda r: r.product_type,
    lambda r: r.sales_representative,
)


@dataclass(frozen=True)
class FilterState:
    search_term: str = ""
    branch: str = ALL
    month: str = ALL
    customer_type: str = ALL

    @classmethod
    def from_mapping(cls, data: Mapping[str, Optional[str]]) -> "FilterState":
        """Build filters from query-string style keys; blanks mean "all"."""

        def pick(key: str) -> str:
            value = (data.get(key) or "").strip()
            return value or ALL

        return cls(
            search_term=(data.get("search") or "").strip(),
            branch=pick("branch"),
            month=pick("month"),
            customer_type=pick("customerType"),
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "search": self.search_term,
            "branch": self.branch,
            "month": self.month,
            "customerType": self.customer_type,
        }

    @property
    def is_default(self) -> bool:
        return self == clear_filters()


@dataclass(frozen=True)
class ListingSummary:
    total: int
    shown: int

    @property
    def empty_reason(self) -> Optional[str]:
        if self.shown:
            return None
        return "no_data" if self.total == 0 else "no_match"

    @property
    def label(self) -> str:
        return f"{self.shown} of {self.total} entries"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "shown": self.shown,
            "label": self.label,
            "emptyReason": self.empty_reason,
        }


def clear_filters() -> FilterState:
    return FilterState()


def _is_active(value: Optional[str]) -> bool:
    return bool(value) and value != ALL


def apply_filters(
    records: Iterable[TransactionRecord], filters: FilterState
) -> List[TransactionRecord]:
    """Return the records matching every active filter, in input order."""
    needle = filters.search_term.strip().lower()

    def matches(record: TransactionRecord) -> bool:
        if needle and not any(needle in get(record).lower() for get in _SEARCH_FIELDS):
            return False
        if _is_active(filters.branch) and record.branch != filters.branch:
            return False
        if _is_active(filters.month) and record.month != filters.month:
            return False
        if (
            _is_active(filters.customer_type)
            and record.customer_classification != filters.customer_type
        ):
            return False
        return True

    return [record for record in records if matches(record)]


def distinct_values(records: Iterable[TransactionRecord], field: str) -> List[str]:
    """Values of ``field`` present in ``records``, in first-seen order."""
    try:
        getter = FILTER_FIELDS[field]
    except KeyError as exc:
        raise ValidationError(
            f"Cannot list values for '{field}'; expected one of: {', '.join(FILTER_FIELDS)}"
        ) from exc
    seen: Dict[str, None] = {}
    for record in records:
        seen.setdefault(getter(record), None)
    return list(seen)


def filter_options(records: Sequence[TransactionRecord]) -> Dict[str, List[str]]:
    return {
        "branches": distinct_values(records, "branch"),
        "months": distinct_values(records, "month"),
        "customerTypes": distinct_values(records, "customerClassification"),
    }


def summarize(total: int, shown: int) -> ListingSummary:
    return ListingSummary(total=total, shown=shown)


def delete_record(
    records: Sequence[TransactionRecord], record_id: str
) -> List[TransactionRecord]:
    """Drop the record with ``record_id``; an unknown id leaves the list as is."""
    return [record for record in records if record.id != record_id]


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def _csv_cell(text: str, always_quote: bool) -> str:
    if always_quote or any(ch in text for ch in (",", '"', "\n", "\r")):
        return _quote(text)
    return text


def export_csv(records: Iterable[TransactionRecord]) -> str:
    """Serialise ``records`` (normally the filtered list) as CSV text.

    Per-unit product details are not part of the export.
    """
    lines = [",".join(label for label, _, _ in CSV_COLUMNS)]
    for record in records:
        lines.append(
            ",".join(_csv_cell(get(record), quoted) for _, get, quoted in CSV_COLUMNS)
        )
    return "\n".join(lines)


def export_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"data-export-{today.isoformat()}.csv"


def format_currency(amount: object) -> str:
    """Format an amount as Indonesian Rupiah without decimals, e.g. ``Rp 50.000.000``."""
    value = Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    grouped = f"{abs(value):,.0f}".replace(",", ".")
    return f"{sign}Rp\u00a0{grouped}"


def record_detail(record: TransactionRecord) -> Dict[str, Any]:
    """Sections shown in the entry details dialog."""
    return {
        "title": f"Entry Details - {record.no_pjb}",
        "basic": {
            "timeStamp": isoformat_utc(record.time_stamp),
            "month": record.month,
            "date": record.date.isoformat(),
            "branch": record.branch,
            "noPJB": record.no_pjb,
        },
        "customer": {
            "customerName": record.customer_name,
            "classification": record.customer_classification.capitalize(),
        },
        "product": {
            "quantity": record.quantity,
            "productType": record.product_type,
            "product": record.product,
            "mark": record.mark,
            "hpp": format_currency(record.hpp),
        },
        "sales": {
            "paymentScheme": record.payment_scheme,
            "salesRepresentative": record.sales_representative,
        },
        "items": [
            {"label": f"Item {index}", **item.to_dict()}
            for index, item in enumerate(record.dynamic_fields, start=1)
        ],
    }
