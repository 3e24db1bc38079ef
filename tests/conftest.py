"""Shared fixtures: isolated data directory, service, Flask app and client."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import pytest

from api.app import create_app
from salesdesk.services import TransactionService
from salesdesk.storage import JSONStorage


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "SALES_TRACKER_ENV",
        "SALES_TRACKER_ALLOWED_ORIGINS",
        "SALES_TRACKER_DATA_DIR",
        "SALES_TRACKER_SEED_DEMO",
        "SALES_TRACKER_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture
def storage(data_dir: Path) -> JSONStorage:
    return JSONStorage(data_dir)


@pytest.fixture
def service(storage: JSONStorage) -> TransactionService:
    return TransactionService(storage)


@pytest.fixture
def app(data_dir: Path):
    app = create_app(data_dir)
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def valid_payload() -> Dict[str, Any]:
    return {
        "date": "2024-02-05",
        "noPJB": "jktb000111",
        "customerClassification": "business",
        "customerName": "PT. Maju, Jaya",
        "quantity": 2,
        "productType": "Engine Type A",
        "hpp": 12500000,
        "paymentScheme": "Cash",
        "salesRepresentative": "Jane Smith",
        "dynamicFields": [
            {"marking": "M-1", "serialNumber": "SN-1", "snEngine": "EN-1"},
        ],
    }
