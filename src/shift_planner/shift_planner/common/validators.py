from __future__ import annotations

from typing import Any, Optional

from ..core.constants import TIMELINE_END_HOUR, TIMELINE_START_HOUR
from ..core.exceptions import ValidationError
from ..timeline.position import parse_time_string


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name}を入力してください")
    return str(value).strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name}は{min_len}文字以上で入力してください")
    return value


def require_int(value: Any, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name}が不正です")


def require_hour(value: Any, field_name: str) -> float:
    """Decimal hour (or "H:MM") within the visible timeline, on a 15-minute step."""

    if isinstance(value, str) and ":" in value:
        hour = parse_time_string(value)
    else:
        try:
            hour = float(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{field_name}が不正です")
    if hour < TIMELINE_START_HOUR or hour > TIMELINE_END_HOUR:
        raise ValidationError(f"{field_name}は{TIMELINE_START_HOUR}:00〜{TIMELINE_END_HOUR}:00の範囲で指定してください")
    if round(hour * 4) != hour * 4:
        raise ValidationError(f"{field_name}は15分単位で指定してください")
    return hour


def require_time_range(start: Any, end: Any) -> tuple[float, float]:
    start_h = require_hour(start, "開始時刻")
    end_h = require_hour(end, "終了時刻")
    if start_h >= end_h:
        raise ValidationError("終了時刻は開始時刻より後にしてください")
    return start_h, end_h
