"""Rule-based posture classification. Rules are checked top to bottom; the first match wins."""
from __future__ import annotations

from typing import Mapping, Optional, Sequence

from .domain import Keypoint, PostureStatus

# Sensor index order: front-left, front-right, back-left, back-right
SENSOR_COUNT = 4

MIN_SEATED_WEIGHT = 200
MAX_LATERAL_IMBALANCE = 0.3
MIN_BACK_SUPPORT = 0.8

MIN_KEYPOINT_SCORE = 0.5
MAX_SHOULDER_TILT = 0.2
FORWARD_HEAD_RATIO = -0.3
MAX_HEAD_TILT = 0.3


def supports_sensor_count(count: int) -> bool:
    return count == SENSOR_COUNT


def classify_from_pressure(values: Sequence[float]) -> PostureStatus:
    front_left, front_right, back_left, back_right = values

    total = front_left + front_right + back_left + back_right
    if total < MIN_SEATED_WEIGHT:
        return PostureStatus.NOT_SITTING

    left = front_left + back_left
    right = front_right + back_right
    if abs(left - right) > MAX_LATERAL_IMBALANCE * total:
        return PostureStatus.POOR

    front = front_left + front_right
    back = back_left + back_right
    if back < MIN_BACK_SUPPORT * front:
        return PostureStatus.LEANING_FORWARD

    return PostureStatus.GOOD


def _usable(keypoints: Mapping[str, Keypoint], part: str) -> Optional[Keypoint]:
    keypoint = keypoints.get(part)
    if keypoint is None or keypoint.score < MIN_KEYPOINT_SCORE:
        return None
    return keypoint


def classify_from_keypoints(keypoints: Mapping[str, Keypoint]) -> PostureStatus:
    """Classify a webcam pose.

    Coordinates are image coordinates: y grows downward and the camera faces
    the subject, so a nose above the shoulder line gives a negative ratio.
    Rules that divide by a zero shoulder or ear width are skipped.
    """
    nose = _usable(keypoints, "nose")
    left_shoulder = _usable(keypoints, "leftShoulder")
    right_shoulder = _usable(keypoints, "rightShoulder")
    if nose is None or left_shoulder is None or right_shoulder is None:
        return PostureStatus.INSUFFICIENT_DATA

    shoulder_diff = abs(left_shoulder.y - right_shoulder.y)
    shoulder_dist = abs(left_shoulder.x - right_shoulder.x)

    if shoulder_dist > 0:
        if shoulder_diff > MAX_SHOULDER_TILT * shoulder_dist:
            return PostureStatus.POOR

        shoulder_center_y = (left_shoulder.y + right_shoulder.y) / 2
        head_forward_ratio = (nose.y - shoulder_center_y) / shoulder_dist
        if head_forward_ratio < FORWARD_HEAD_RATIO:
            return PostureStatus.LEANING_FORWARD

    left_ear = _usable(keypoints, "leftEar")
    right_ear = _usable(keypoints, "rightEar")
    if left_ear is not None and right_ear is not None:
        ear_diff = abs(left_ear.y - right_ear.y)
        ear_dist = abs(left_ear.x - right_ear.x)
        if ear_dist > 0 and ear_diff > MAX_HEAD_TILT * ear_dist:
            return PostureStatus.POOR

    return PostureStatus.GOOD
