from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .domain import PostureStatus, PostureVerdict, StoredRecord, utcnow
from .errors import StorageUnavailable
from .models import PostureRecord
from .parsing import parse_keypoints

logger = logging.getLogger(__name__)


class ReadingStore(ABC):
    @abstractmethod
    def append(self, verdict: PostureVerdict) -> StoredRecord:
        """Persist a verdict. Raises StorageUnavailable on backend failure."""

    @abstractmethod
    def query(
        self,
        source_id: str,
        from_time: Optional[datetime] = None,
        to_time: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[StoredRecord]:
        """Matching records oldest first by (timestamp, id). Bounds are inclusive; a limit keeps the newest."""


class SqlReadingStore(ReadingStore):
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def append(self, verdict: PostureVerdict) -> StoredRecord:
        db: Session = self._session_factory()
        try:
            row = PostureRecord(
                source_id=verdict.source_id,
                timestamp=verdict.timestamp,
                stored_at=utcnow(),
                sensors=verdict.sensors_payload(),
                pose_data=verdict.pose_payload(),
                posture_status=verdict.status.value,
            )
            db.add(row)
            db.commit()
            return StoredRecord(id=row.id, verdict=verdict, stored_at=row.stored_at)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to store reading for {verdict.source_id}: {e}")
            raise StorageUnavailable(f"Reading store unavailable: {e}") from e
        finally:
            db.close()

    def query(self, source_id, from_time=None, to_time=None, limit=None):
        db: Session = self._session_factory()
        try:
            query = db.query(PostureRecord).filter(PostureRecord.source_id == source_id)
            if from_time is not None:
                query = query.filter(PostureRecord.timestamp >= from_time)
            if to_time is not None:
                query = query.filter(PostureRecord.timestamp <= to_time)

            if limit is not None:
                rows = (
                    query.order_by(PostureRecord.timestamp.desc(), PostureRecord.id.desc())
                    .limit(limit)
                    .all()
                )
                rows.reverse()
            else:
                rows = query.order_by(PostureRecord.timestamp.asc(), PostureRecord.id.asc()).all()

            return [_to_record(row) for row in rows]
        except SQLAlchemyError as e:
            logger.error(f"Failed to query readings for {source_id}: {e}")
            raise StorageUnavailable(f"Reading store unavailable: {e}") from e
        finally:
            db.close()


def _to_record(row: PostureRecord) -> StoredRecord:
    sensors = None
    if row.sensors is not None:
        sensors = tuple(float(item["value"]) for item in row.sensors)
    keypoints = None
    if row.pose_data is not None:
        keypoints = parse_keypoints(row.pose_data.get("keypoints", []))

    verdict = PostureVerdict(
        source_id=row.source_id,
        status=PostureStatus(row.posture_status),
        timestamp=row.timestamp,
        sensors=sensors,
        keypoints=keypoints,
    )
    return StoredRecord(id=row.id, verdict=verdict, stored_at=row.stored_at)


class MemoryReadingStore(ReadingStore):
    """Process-local store, used when no database is wanted and in tests."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: list[StoredRecord] = []

    def append(self, verdict: PostureVerdict) -> StoredRecord:
        with self._lock:
            record = StoredRecord(id=len(self._records) + 1, verdict=verdict, stored_at=utcnow())
            self._records.append(record)
            return record

    def query(self, source_id, from_time=None, to_time=None, limit=None):
        with self._lock:
            matches = [
                record
                for record in self._records
                if record.source_id == source_id
                and (from_time is None or record.timestamp >= from_time)
                and (to_time is None or record.timestamp <= to_time)
            ]
        matches.sort(key=lambda record: (record.timestamp, record.id))
        if limit is not None:
            matches = matches[-limit:] if limit > 0 else []
        return matches

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
