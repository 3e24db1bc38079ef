"""Sample transactions for an empty store."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from .models import TransactionRecord
from .services import TransactionService

logger = logging.getLogger(__name__)

DEMO_RECORDS: List[Dict[str, Any]] = [
    {
        "id": "1",
        "timeStamp": "2024-01-15T10:30:00Z",
        "date": "2024-01-15",
        "noPJB": "JKTB001234",
        "customerName": "PT. ABC Manufacturing",
        "customerClassification": "business",
        "quantity": 2,
        "productType": "Engine Type A",
        "hpp": "50000000",
        "paymentScheme": "Credit 30 Days",
        "salesRepresentative": "John Doe",
        "dynamicFields": [
            {"marking": "MRK001", "serialNumber": "SN001234", "snEngine": "ENG001234"},
            {"marking": "MRK002", "serialNumber": "SN001235", "snEngine": "ENG001235"},
        ],
    },
    {
        "id": "2",
        "timeStamp": "2024-01-16T14:20:00Z",
        "date": "2024-01-16",
        "noPJB": "BDGB005678",
        "customerName": "CV. XYZ Trading",
        "customerClassification": "business",
        "quantity": 1,
        "productType": "Generator Type A",
        "hpp": "75000000",
        "paymentScheme": "Cash",
        "salesRepresentative": "Sarah Wilson",
        "dynamicFields": [
            {"marking": "MRK003", "serialNumber": "SN005678", "snEngine": "ENG005678"},
        ],
    },
    {
        "id": "3",
        "timeStamp": "2024-01-17T09:15:00Z",
        "date": "2024-01-17",
        "noPJB": "SBYB009876",
        "customerName": "Dinas Pekerjaan Umum",
        "customerClassification": "government",
        "quantity": 3,
        "productType": "Engine Type B",
        "hpp": "45000000",
        "paymentScheme": "Credit 60 Days",
        "salesRepresentative": "Tom Anderson",
        "dynamicFields": [
            {"marking": "MRK004", "serialNumber": "SN009876", "snEngine": "ENG009876"},
            {"marking": "MRK005", "serialNumber": "SN009877", "snEngine": "ENG009877"},
            {"marking": "MRK006", "serialNumber": "SN009878", "snEngine": "ENG009878"},
        ],
    },
]


def seed_demo_records(service: TransactionService) -> int:
    """Insert the demo records when the store is empty; returns how many were added."""
    if service.fetch_all():
        logger.info("Store already has data; demo records not seeded")
        return 0
    for payload in DEMO_RECORDS:
        service.submit(TransactionRecord.from_dict(payload))
    return len(DEMO_RECORDS)
