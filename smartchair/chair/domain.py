from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Optional, Sequence


class PostureStatus(str, Enum):
    GOOD = "good"
    POOR = "poor"
    LEANING_FORWARD = "leaning_forward"
    NOT_SITTING = "not_sitting"
    INSUFFICIENT_DATA = "insufficient_data"
    # wire value only; malformed readings raise InvalidInput and are never stored
    INVALID_INPUT = "invalid_input"


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


@dataclass(frozen=True)
class Keypoint:
    x: float
    y: float
    score: float

    def to_posenet(self, part: str) -> dict[str, Any]:
        return {"part": part, "score": self.score, "position": {"x": self.x, "y": self.y}}


@dataclass(frozen=True)
class SensorReading:
    """One push from the chair: four pressure values, unvalidated."""

    source_id: str
    values: Sequence[Any]
    captured_at: Optional[datetime] = None


@dataclass(frozen=True)
class PostureVerdict:
    source_id: str
    status: PostureStatus
    timestamp: datetime
    sensors: Optional[tuple[float, ...]] = None
    keypoints: Optional[Mapping[str, Keypoint]] = None

    @property
    def has_pose_data(self) -> bool:
        return self.keypoints is not None

    def sensors_payload(self) -> Optional[list[dict[str, float]]]:
        if self.sensors is None:
            return None
        return [{"value": value} for value in self.sensors]

    def pose_payload(self) -> Optional[dict[str, Any]]:
        if self.keypoints is None:
            return None
        return {"keypoints": [kp.to_posenet(part) for part, kp in self.keypoints.items()]}

    def to_payload(self) -> dict[str, Any]:
        """Wire shape shared by storage, history and live events."""
        payload: dict[str, Any] = {
            "sourceId": self.source_id,
            "timestamp": self.timestamp.isoformat(),
            "postureStatus": self.status.value,
        }
        if self.sensors is not None:
            payload["sensors"] = self.sensors_payload()
        if self.keypoints is not None:
            payload["poseData"] = self.pose_payload()
        return payload


@dataclass(frozen=True)
class StoredRecord:
    id: int
    verdict: PostureVerdict
    stored_at: datetime

    @property
    def source_id(self) -> str:
        return self.verdict.source_id

    @property
    def timestamp(self) -> datetime:
        return self.verdict.timestamp

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            **self.verdict.to_payload(),
            "storedAt": self.stored_at.isoformat(),
        }
