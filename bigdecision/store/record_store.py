from __future__ import annotations

import threading
from typing import Protocol

from bigdecision.store.models import DecisionRecord


class RecordNotFound(KeyError):
    pass


class RecordStore(Protocol):
    def list(self) -> list[DecisionRecord]: ...

    def create(self, record: DecisionRecord) -> DecisionRecord: ...

    def update(self, record: DecisionRecord) -> DecisionRecord: ...

    def delete(self, record_id: str) -> None: ...


class InMemoryRecordStore:
    """Records keyed by id, listed in insertion order."""

    def __init__(self, records: list[DecisionRecord] | None = None) -> None:
        self._records: dict[str, DecisionRecord] = {r.record_id: r for r in records or []}
        self._lock = threading.Lock()

    def list(self) -> list[DecisionRecord]:
        with self._lock:
            return list(self._records.values())

    def create(self, record: DecisionRecord) -> DecisionRecord:
        with self._lock:
            if record.record_id in self._records:
                raise ValueError(f"Record already exists: {record.record_id}")
            self._records[record.record_id] = record
        return record

    def update(self, record: DecisionRecord) -> DecisionRecord:
        with self._lock:
            if record.record_id not in self._records:
                raise RecordNotFound(record.record_id)
            self._records[record.record_id] = record
        return record

    def delete(self, record_id: str) -> None:
        with self._lock:
            self._records.pop(record_id, None)


def get_record_store(records: list[DecisionRecord] | None = None) -> RecordStore:
    return InMemoryRecordStore(records)
