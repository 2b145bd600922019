from __future__ import annotations

import csv
import io
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional

from ..common.validators import require_time_range
from ..core.exceptions import ValidationError

SCHEDULE_COLUMNS = ("empNo", "date", "name", "status", "time", "memo")

_TIME_RANGE_RE = re.compile(r"^\s*(\d{1,2}:\d{2})\s*-\s*(\d{1,2}:\d{2})\s*$")
_DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d")


@dataclass(frozen=True)
class ScheduleRow:
    row: int
    emp_no: str
    work_date: date
    name: str
    status: Optional[str]
    start: Optional[float]
    end: Optional[float]
    memo: str = ""

    @property
    def has_schedule(self) -> bool:
        return bool(self.status) and self.start is not None


def parse_csv(text: str) -> list[dict]:
    """Header row + comma separated rows -> list of dicts (blank lines dropped)."""

    reader = csv.reader(io.StringIO((text or "").lstrip("\ufeff")))
    rows = [r for r in reader if any(cell.strip() for cell in r)]
    if not rows:
        return []

    header = [h.strip() for h in rows[0]]
    out: list[dict] = []
    for r in rows[1:]:
        values = [v.strip() for v in r] + [""] * (len(header) - len(r))
        out.append(dict(zip(header, values)))
    return out


def _parse_date(value: str) -> date:
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value.strip(), fmt).date()
        except ValueError:
            continue
    raise ValidationError(f"日付の形式が不正です: {value}")


def parse_time_range(value: str) -> tuple[float, float]:
    """ "09:00-18:00" -> (9.0, 18.0)."""

    m = _TIME_RANGE_RE.match(value or "")
    if not m:
        raise ValidationError(f"時間の形式が不正です: {value}")
    return require_time_range(m.group(1), m.group(2))


def parse_schedule_rows(rows: Iterable[dict]) -> tuple[list[ScheduleRow], list[dict]]:
    """Validate every row; returns (parsed rows, per-row errors)."""

    parsed: list[ScheduleRow] = []
    errors: list[dict] = []
    for index, raw in enumerate(rows, start=1):
        emp_no = str(raw.get("empNo") or "").strip()
        try:
            if not emp_no:
                raise ValidationError("empNoは必須です")
            work_date = _parse_date(str(raw.get("date") or ""))
            status = str(raw.get("status") or "").strip() or None
            time_range = str(raw.get("time") or "").strip()
            start = end = None
            if status and time_range:
                start, end = parse_time_range(time_range)
            parsed.append(
                ScheduleRow(
                    row=index,
                    emp_no=emp_no,
                    work_date=work_date,
                    name=str(raw.get("name") or "").strip(),
                    status=status,
                    start=start,
                    end=end,
                    memo=str(raw.get("memo") or "").strip(),
                )
            )
        except ValidationError as e:
            errors.append({"row": index, "empNo": emp_no, "error": str(e)})
    return parsed, errors
