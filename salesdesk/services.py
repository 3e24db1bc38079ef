"""Framework-agnostic business services for the sales tracker."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from .entry_form import assemble_record, validate
from .exceptions import (
    DuplicateRecordError,
    PermanentPersistenceError,
    PersistenceError,
    RecordNotFoundError,
)
from .list_view import FilterState, apply_filters, export_csv
from .models import TransactionRecord
from .storage import JSONStorage

logger = logging.getLogger(__name__)


class TransactionService:
    """Stores submitted transactions and supplies them to the list view.

    Every change is written through to storage before the in-memory
    collection is swapped, so a failed write leaves the collection as it was.
    """

    def __init__(self, storage: JSONStorage, resource: str = "transactions.json") -> None:
        self._storage = storage
        self._resource = resource
        self._records: Dict[str, TransactionRecord] = {}
        self.load()  # Hydrate in-memory cache from persistence on construction.

    # Public API -----------------------------------------------------------
    def add(self, payload: Mapping[str, Any], *, now: Optional[datetime] = None) -> TransactionRecord:
        """Validate a form payload, assemble the record and submit it."""
        entry = validate(payload)
        record = assemble_record(entry, timestamp=now)
        self.submit(record)
        return record

    def submit(self, record: TransactionRecord) -> str:
        if record.id in self._records:
            raise DuplicateRecordError(f"Transaction {record.id} already exists")
        self._commit({**self._records, record.id: record})
        logger.info("Stored transaction %s (No. PJB %s)", record.id, record.no_pjb)
        return record.id

    def update(self, record_id: str, changes: Mapping[str, Any]) -> TransactionRecord:
        existing = self._get_or_raise(record_id)
        # Merge existing serialised data with incoming changes to support partial edits.
        merged = {**existing.to_dict(), **changes}
        entry = validate(merged)
        updated = assemble_record(entry, timestamp=existing.time_stamp, record_id=existing.id)
        records = dict(self._records)
        records[record_id] = updated
        self._commit(records)
        logger.info("Updated transaction %s", record_id)
        return updated

    def delete_by_id(self, record_id: str) -> bool:
        """Remove a record; returns False without touching storage if it is absent."""
        if record_id not in self._records:
            logger.debug("Delete of unknown transaction %s ignored", record_id)
            return False
        records = dict(self._records)
        del records[record_id]
        self._commit(records)
        logger.info("Deleted transaction %s", record_id)
        return True

    def get(self, record_id: str) -> TransactionRecord:
        """Return a record or raise if it does not exist."""
        return self._get_or_raise(record_id)

    def fetch_all(self) -> List[TransactionRecord]:
        """All records in submission order."""
        return list(self._records.values())

    def list(self, filters: Optional[FilterState] = None) -> List[TransactionRecord]:
        records = self.fetch_all()
        if filters is None:
            return records
        return apply_filters(records, filters)

    def export(self, filters: Optional[FilterState] = None) -> str:
        return export_csv(self.list(filters))

    def load(self) -> None:
        """Load existing transactions from persistence."""
        raw_records = self._storage.load(self._resource)
        try:
            records = [TransactionRecord.from_dict(payload) for payload in raw_records]
        except (AttributeError, KeyError, TypeError, ValueError, ArithmeticError) as exc:
            raise PermanentPersistenceError(
                f"Malformed transaction data in {self._resource}"
            ) from exc
        self._records = {record.id: record for record in records}

    # Internal helpers -----------------------------------------------------
    def _commit(self, records: Dict[str, TransactionRecord]) -> None:
        try:
            self._storage.save(self._resource, [record.to_dict() for record in records.values()])
        except PersistenceError as exc:
            logger.warning("Could not persist transactions: %s", exc)
            raise
        self._records = records

    def _get_or_raise(self, record_id: str) -> TransactionRecord:
        try:
            return self._records[record_id]
        except KeyError as exc:
            raise RecordNotFoundError(f"Transaction {record_id} not found") from exc
