from __future__ import annotations

from datetime import datetime
from typing import Optional

from .domain import StoredRecord
from .errors import InvalidInput
from .store import ReadingStore


class HistoryQueryService:
    """Read path over the store for the history table and the trend chart."""

    def __init__(self, store: ReadingStore, default_limit: int = 100, max_limit: int = 1000) -> None:
        self.store = store
        self.default_limit = default_limit
        self.max_limit = max_limit

    def history(
        self,
        source_id: str,
        from_time: Optional[datetime] = None,
        to_time: Optional[datetime] = None,
        limit: Optional[int] = None,
        newest_first: bool = True,
    ) -> list[StoredRecord]:
        if limit is None:
            limit = self.default_limit
        if limit <= 0:
            raise InvalidInput("limit must be positive")
        if from_time is not None and to_time is not None and from_time > to_time:
            raise InvalidInput("from must not be after to")

        records = self.store.query(source_id, from_time, to_time, min(limit, self.max_limit))
        if newest_first:
            records.reverse()
        return records
