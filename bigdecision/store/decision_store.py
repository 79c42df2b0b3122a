from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from bigdecision.schemas.decision import DecisionCategory
from bigdecision.store.models import DecisionRecord
from bigdecision.store.record_store import RecordStore


class DecisionStore:
    """History helpers on top of an injected record store."""

    def __init__(self, port: RecordStore) -> None:
        self.port = port

    @property
    def records(self) -> list[DecisionRecord]:
        return self.port.list()

    def add(self, record: DecisionRecord) -> DecisionRecord:
        return self.port.create(record)

    def update(self, record: DecisionRecord) -> DecisionRecord:
        return self.port.update(record)

    def delete(self, record_id: str) -> None:
        self.port.delete(record_id)

    def get(self, record_id: str) -> DecisionRecord | None:
        return next((r for r in self.port.list() if r.record_id == record_id), None)

    def toggle_favorite(self, record_id: str) -> DecisionRecord | None:
        record = self.get(record_id)
        if record is None:
            return None
        return self.port.update(replace(record, favorited=not record.favorited))

    def favorites(self) -> list[DecisionRecord]:
        return [r for r in self.port.list() if r.favorited]

    def search(
        self,
        text: str = "",
        category: DecisionCategory | None = None,
        favorites_only: bool = False,
    ) -> list[DecisionRecord]:
        needle = text.strip().casefold()
        matches = []
        for record in self.port.list():
            request = record.request
            if needle and not any(
                needle in value.casefold()
                for value in (request.title, request.option_a.title, request.option_b.title)
            ):
                continue
            if favorites_only and not record.favorited:
                continue
            if category is not None and request.category != category:
                continue
            matches.append(record)
        return matches

    # statistics

    def count_by_category(self, category: DecisionCategory) -> int:
        return sum(1 for r in self.port.list() if r.request.category == category)

    def average_confidence(self) -> float:
        confidences = [r.result.confidence for r in self.port.list() if r.result is not None]
        return sum(confidences) / len(confidences) if confidences else 0.0

    def in_range(self, start: datetime, end: datetime) -> list[DecisionRecord]:
        return [r for r in self.port.list() if start <= r.created_at <= end]

    def grouped_by_category(self) -> list[tuple[DecisionCategory, int]]:
        counts = {category: 0 for category in DecisionCategory}
        for record in self.port.list():
            counts[record.request.category] += 1
        return sorted(counts.items(), key=lambda item: item[1], reverse=True)
