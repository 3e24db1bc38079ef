"""Persistence utilities for the sales tracker core services."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List

from .exceptions import PermanentPersistenceError, TransientPersistenceError

logger = logging.getLogger(__name__)


class JSONStorage:
    """File-based JSON storage with crash-safe writes.

    I/O failures surface as ``TransientPersistenceError``; a data file that
    cannot be decoded is a ``PermanentPersistenceError``.
    """

    def __init__(self, base_path: Path) -> None:
        self._base_path = Path(base_path)
        try:
            self._base_path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise TransientPersistenceError(f"Unable to create {self._base_path}") from exc

    def load(self, resource: str) -> List[Dict[str, Any]]:
        path = self._base_path / resource
        if not path.exists():
            logger.debug("No data file at %s; starting empty", path)
            return []
        try:
            with path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except json.JSONDecodeError as exc:
            raise PermanentPersistenceError(f"Corrupted JSON data in {path}") from exc
        except OSError as exc:
            raise TransientPersistenceError(f"Unable to read from {path}") from exc

        if not isinstance(payload, list):
            raise PermanentPersistenceError(f"Expected list payload in {path}")
        logger.debug("Loaded %d records from %s", len(payload), path)
        return payload

    def save(self, resource: str, records: Iterable[Dict[str, Any]]) -> None:
        path = self._base_path / resource
        temp_path = path.with_suffix(path.suffix + ".tmp")
        snapshot = list(records)
        try:
            with temp_path.open("w", encoding="utf-8") as handle:
                json.dump(snapshot, handle, indent=2, ensure_ascii=False)
                handle.flush()
            # replace() is an atomic rename on POSIX.
            temp_path.replace(path)
        except OSError as exc:
            raise TransientPersistenceError(f"Unable to write to {path}") from exc
        logger.debug("Saved %d records to %s", len(snapshot), path)

    @property
    def base_path(self) -> Path:
        return self._base_path
