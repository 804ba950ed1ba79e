from __future__ import annotations

from datetime import datetime, time
from typing import Optional

from ..domain import to_naive_utc
from ..errors import InvalidInput


def parse_time(value: Optional[str], *, end_of_day: bool = False) -> Optional[datetime]:
    """Parse an ISO date or datetime into naive UTC.

    A bare date (``2025-04-27``) means the start of that day, or its last
    instant when ``end_of_day`` is set, so ``to=<date>`` covers the whole day.
    """
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise InvalidInput(f"Invalid date: {value!r}")
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise InvalidInput(f"Invalid date: {value!r}") from e

    if end_of_day and len(value) == 10:
        parsed = datetime.combine(parsed.date(), time.max)
    return to_naive_utc(parsed)
