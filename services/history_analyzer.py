import math
from typing import Any, List

from core.models import HistoryStats

HOUR_MS = 60 * 60 * 1000
DAY_MS = 24 * HOUR_MS
WEEK_MS = 7 * DAY_MS


def _valid_timestamps(timestamps: Any) -> List[float]:
    if not isinstance(timestamps, (list, tuple)):
        return []
    return sorted(
        value
        for value in timestamps
        if isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)
    )


def summarize(timestamps: Any, now: float) -> HistoryStats:
    """
    Compute windowed statistics over a sighting history.

    Windows are inclusive trailing windows ending at ``now``, so every count is a
    superset of the narrower one. Malformed input yields an empty summary.
    """
    valid = _valid_timestamps(timestamps)
    if not valid:
        return HistoryStats()

    average_interval_ms = None
    if len(valid) > 1:
        average_interval_ms = (valid[-1] - valid[0]) / (len(valid) - 1)

    return HistoryStats(
        total=len(valid),
        last_hour=sum(1 for value in valid if now - value <= HOUR_MS),
        last_day=sum(1 for value in valid if now - value <= DAY_MS),
        last_week=sum(1 for value in valid if now - value <= WEEK_MS),
        first_seen=valid[0],
        last_seen=valid[-1],
        average_interval_ms=average_interval_ms,
    )
