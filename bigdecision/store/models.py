from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from bigdecision.schemas.decision import DecisionRequest, DecisionResult


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class DecisionRecord:
    request: DecisionRequest
    result: DecisionResult | None = None
    record_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=_utcnow)
    favorited: bool = False

    def with_result(self, result: DecisionResult | None) -> "DecisionRecord":
        return replace(self, result=result)

    def cleared(self) -> "DecisionRecord":
        """Copy with the result removed, keeping identity, creation time and favorite flag."""
        return replace(self, result=None)
