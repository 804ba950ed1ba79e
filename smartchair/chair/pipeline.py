from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, Optional

from .classifier import classify_from_keypoints, classify_from_pressure
from .domain import PostureVerdict, SensorReading, to_naive_utc, utcnow
from .errors import InvalidInput, PublishFailure
from .hub import BroadcastHub
from .parsing import parse_keypoints, parse_sensor_values
from .store import ReadingStore

logger = logging.getLogger(__name__)


class IngestionPipeline:
    """Validate, classify, store, then publish.

    Submissions for one source hold that source's lock across append and
    publish, so store order and hub order agree per source.
    """

    def __init__(self, store: ReadingStore, hub: BroadcastHub) -> None:
        self.store = store
        self.hub = hub
        self._locks_guard = threading.Lock()
        # source id -> [lock, number of submissions holding or waiting on it]
        self._source_locks: dict[str, list] = {}

    @contextmanager
    def _source_lock(self, source_id: str) -> Iterator[None]:
        with self._locks_guard:
            entry = self._source_locks.get(source_id)
            if entry is None:
                entry = self._source_locks[source_id] = [threading.Lock(), 0]
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._source_locks[source_id]

    def submit_sensor_reading(self, reading: SensorReading) -> PostureVerdict:
        _check_source(reading.source_id)
        values = parse_sensor_values(reading.values)

        verdict = PostureVerdict(
            source_id=reading.source_id,
            status=classify_from_pressure(values),
            timestamp=_timestamp(reading.captured_at),
            sensors=values,
        )
        return self._commit(verdict)

    def submit_keypoints(
        self,
        source_id: str,
        keypoints: Any,
        captured_at: Optional[datetime] = None,
    ) -> PostureVerdict:
        """Classify a pose. Missing body parts give insufficient_data, not an error."""
        _check_source(source_id)
        parsed = parse_keypoints(keypoints)

        verdict = PostureVerdict(
            source_id=source_id,
            status=classify_from_keypoints(parsed),
            timestamp=_timestamp(captured_at),
            keypoints=parsed,
        )
        return self._commit(verdict)

    def _commit(self, verdict: PostureVerdict) -> PostureVerdict:
        with self._source_lock(verdict.source_id):
            # StorageUnavailable propagates; nothing is published for it
            record = self.store.append(verdict)
            logger.info(
                f"Stored reading {record.id} for {verdict.source_id}: {verdict.status.value}"
            )
            self._publish(verdict)
        return verdict

    def _publish(self, verdict: PostureVerdict) -> None:
        try:
            self.hub.publish(verdict)
        except PublishFailure as e:
            logger.warning(f"Failed to publish verdict for {verdict.source_id}: {e}")
        except Exception as e:
            logger.error(f"Unexpected publish error for {verdict.source_id}: {e}")


def _timestamp(captured_at: Optional[datetime]) -> datetime:
    if captured_at is None:
        return utcnow()
    return to_naive_utc(captured_at)


def _check_source(source_id: Any) -> None:
    if not isinstance(source_id, str) or not source_id.strip():
        raise InvalidInput("source id must be a non-empty string")
