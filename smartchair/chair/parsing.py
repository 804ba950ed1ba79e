from __future__ import annotations

import math
import re
from typing import Any, Mapping

from .classifier import SENSOR_COUNT, supports_sensor_count
from .domain import Keypoint
from .errors import InvalidInput

_SNAKE = re.compile(r"_([a-z])")


def _number(value: Any, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInput(f"{what} must be a number, got {value!r}")
    value = float(value)
    if not math.isfinite(value):
        raise InvalidInput(f"{what} must be finite, got {value!r}")
    return value


def parse_sensor_values(raw: Any) -> tuple[float, ...]:
    """Accept ``[12, 30, ...]`` or the ESP32 form ``[{"value": 12}, ...]``."""
    if not isinstance(raw, (list, tuple)):
        raise InvalidInput("Invalid sensor data format")
    if not supports_sensor_count(len(raw)):
        raise InvalidInput(f"Expected {SENSOR_COUNT} sensor values, got {len(raw)}")

    values = []
    for index, item in enumerate(raw):
        if isinstance(item, Mapping):
            if "value" not in item:
                raise InvalidInput(f"sensor {index} has no value")
            item = item["value"]
        values.append(_number(item, f"sensor {index}"))
    return tuple(values)


def normalize_part(name: str) -> str:
    """``left_shoulder`` -> ``leftShoulder``; PoseNet names pass through."""
    return _SNAKE.sub(lambda match: match.group(1).upper(), name.strip())


def _score(value: Any, part: str) -> float:
    score = _number(value, f"{part}.score")
    if not 0.0 <= score <= 1.0:
        raise InvalidInput(f"{part}.score must be between 0 and 1, got {score!r}")
    return score


def _parse_keypoint(part: str, item: Any) -> Keypoint:
    if isinstance(item, Mapping):
        position = item.get("position", item)
        if not isinstance(position, Mapping):
            raise InvalidInput(f"keypoint {part} has no position")
        score = item.get("score", item.get("confidence"))
        if score is None:
            raise InvalidInput(f"keypoint {part} has no score")
        return Keypoint(
            x=_number(position.get("x"), f"{part}.x"),
            y=_number(position.get("y"), f"{part}.y"),
            score=_score(score, part),
        )
    if isinstance(item, (list, tuple)) and len(item) == 3:
        x, y, score = item
        return Keypoint(
            x=_number(x, f"{part}.x"),
            y=_number(y, f"{part}.y"),
            score=_score(score, part),
        )
    raise InvalidInput(f"keypoint {part} is malformed")


def parse_keypoints(raw: Any) -> dict[str, Keypoint]:
    """Accept a PoseNet keypoint list or a ``{part: {x, y, score}}`` mapping.

    Parts that are missing are simply absent from the result; the classifier
    turns that into an insufficient_data verdict.
    """
    parsed: dict[str, Keypoint] = {}

    if isinstance(raw, Mapping):
        for part, item in raw.items():
            if isinstance(item, Keypoint):
                parsed[normalize_part(str(part))] = item
            else:
                parsed[normalize_part(str(part))] = _parse_keypoint(str(part), item)
        return parsed

    if isinstance(raw, (list, tuple)):
        for item in raw:
            if not isinstance(item, Mapping) or not isinstance(item.get("part"), str):
                raise InvalidInput("keypoint entries need a part name")
            part = item["part"]
            parsed[normalize_part(part)] = _parse_keypoint(part, item)
        return parsed

    raise InvalidInput("Invalid keypoints data")
