"""Static reference data shared by the entry form and the list view."""

from __future__ import annotations

from typing import Dict, Tuple

PRODUCT_CATALOG: Dict[str, Dict[str, str]] = {
    "Engine Type A": {"product": "Engine Model X1", "mark": "Mark-A1"},
    "Engine Type B": {"product": "Engine Model X2", "mark": "Mark-B1"},
    "Generator Type A": {"product": "Generator Model G1", "mark": "Mark-G1"},
    "Generator Type B": {"product": "Generator Model G2", "mark": "Mark-G2"},
}

BRANCH_REPRESENTATIVES: Dict[str, Tuple[str, ...]] = {
    "JKTB": ("John Doe", "Jane Smith", "Mike Johnson"),
    "BDGB": ("Sarah Wilson", "David Brown", "Lisa Davis"),
    "SBYB": ("Tom Anderson", "Emma Taylor", "Chris Wilson"),
    "DPSB": ("Alex Johnson", "Maria Garcia", "Robert Lee"),
}

PAYMENT_SCHEMES: Tuple[str, ...] = (
    "Cash",
    "Credit 30 Days",
    "Credit 60 Days",
    "Credit 90 Days",
    "Installment",
)

CUSTOMER_CLASSIFICATIONS: Tuple[str, ...] = ("business", "government", "individual")

BRANCH_CODE_LENGTH = 4

MAX_QUANTITY = 1000

# HPP must stay below 10 ** (MAX_HPP_EXPONENT + 1).
MAX_HPP_EXPONENT = 15


def reference_data() -> Dict[str, object]:
    """Return the catalogs in a JSON-friendly shape for form drop-downs."""
    return {
        "productTypes": {
            name: dict(details) for name, details in PRODUCT_CATALOG.items()
        },
        "branches": {
            code: list(names) for code, names in BRANCH_REPRESENTATIVES.items()
        },
        "paymentSchemes": list(PAYMENT_SCHEMES),
        "customerClassifications": list(CUSTOMER_CLASSIFICATIONS),
    }
