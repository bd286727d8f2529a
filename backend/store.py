# Billing record store - in-memory, one instance per app (injected, never module-global)
from __future__ import annotations

import logging
from itertools import count
from typing import Any, Dict, Iterable, List, Mapping, Optional

logger = logging.getLogger(__name__)


class BillingRecordStore:
    """
    Holds raw billing rows exactly as received, keyed by an assigned recordId.
    Normalization happens at classification time, not here.
    """

    def __init__(self) -> None:
        self._records: Dict[str, Dict[str, Any]] = {}
        self._ids = count(1)

    def __len__(self) -> int:
        return len(self._records)

    def add(self, raw: Mapping[str, Any]) -> Dict[str, Any]:
        """Store a copy of the row with a fresh recordId and return it."""
        record_id = f"rec_{next(self._ids)}"
        record = dict(raw)
        record["recordId"] = record_id
        self._records[record_id] = record
        logger.info("Stored billing record %s", record_id)
        return dict(record)

    def add_many(self, rows: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        return [self.add(row) for row in rows]

    def get(self, record_id: str) -> Optional[Dict[str, Any]]:
        record = self._records.get(record_id)
        return dict(record) if record is not None else None

    def list_records(self) -> List[Dict[str, Any]]:
        """All rows in insertion order."""
        return [dict(r) for r in self._records.values()]

    def delete(self, record_id: str) -> bool:
        """Remove a row. Returns False when it did not exist."""
        if self._records.pop(record_id, None) is None:
            return False
        logger.info("Deleted billing record %s", record_id)
        return True

    def clear(self) -> None:
        self._records.clear()
        self._ids = count(1)
        logger.info("Cleared billing record store")
