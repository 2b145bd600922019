"""Decimal-hour <-> horizontal position mapping for the 8:00-21:00 day timeline.

The timeline is a fixed grid of 15-minute cells (52 cells). Every value that
crosses the mapping is snapped to the nearest cell boundary.
"""

from __future__ import annotations

import math
import re
from datetime import datetime
from typing import Optional

from ..core.constants import (
    MINUTES_STEP,
    QUARTERS_PER_HOUR,
    TIMELINE_END_HOUR,
    TIMELINE_START_HOUR,
    TOTAL_QUARTERS,
)
from ..core.exceptions import ValidationError

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def quantize_hour(hour: float) -> float:
    """Snap to the nearest quarter hour (halves round up)."""

    return math.floor(hour * QUARTERS_PER_HOUR + 0.5) / QUARTERS_PER_HOUR


def time_to_position_percent(time: float) -> float:
    quarters_from_start = (quantize_hour(time) - TIMELINE_START_HOUR) * QUARTERS_PER_HOUR
    percent = quarters_from_start / TOTAL_QUARTERS * 100
    return max(0.0, min(100.0, percent))


def position_percent_to_time(percent: float) -> float:
    percent = max(0.0, min(100.0, float(percent)))
    quarters_from_start = percent / 100 * TOTAL_QUARTERS
    return quantize_hour(TIMELINE_START_HOUR + quarters_from_start / QUARTERS_PER_HOUR)


def format_decimal_time(time: float) -> str:
    """9.5 -> "9:30"."""

    hours = int(math.floor(time))
    minutes = int(round((time - hours) * 60))
    if minutes == 60:
        hours, minutes = hours + 1, 0
    return f"{hours}:{minutes:02d}"


def parse_time_string(value: str) -> float:
    """"9:30" / "09:30" -> 9.5."""

    m = _TIME_RE.match((value or "").strip())
    if not m:
        raise ValidationError(f"時刻の形式が不正です: {value}")
    hours, minutes = int(m.group(1)), int(m.group(2))
    if hours > 24 or minutes >= 60:
        raise ValidationError(f"時刻の形式が不正です: {value}")
    return hours + minutes / 60


def generate_time_options(
    start_hour: int = TIMELINE_START_HOUR,
    end_hour: int = TIMELINE_END_HOUR,
) -> list[dict]:
    options = []
    for h in range(start_hour, end_hour):
        for m in range(0, 60, MINUTES_STEP):
            options.append({"value": h + m / 60, "label": f"{h:02d}:{m:02d}"})
    options.append({"value": float(end_hour), "label": f"{end_hour}:00"})
    return options


def current_time_position(now: datetime) -> Optional[float]:
    """Position of the "now" marker, or None outside the visible range."""

    hour = now.hour + now.minute / 60
    if hour < TIMELINE_START_HOUR or hour > TIMELINE_END_HOUR:
        return None
    return time_to_position_percent(hour)
