"""Canonical import records.

Staff payloads arrive in several shapes (a bare list, `{"employeeData": [...]}` or
`{"staff": [...]}`, old `department` / new `dept` keys); `normalize_payload` is the
only place that knows about them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from ..core.constants import DEFAULT_DEPARTMENT, DEFAULT_TEAM
from ..core.exceptions import ValidationError

# JSON key -> contract column
_HOUR_KEYS = {
    "mondayHours": "monday_hours",
    "tuesdayHours": "tuesday_hours",
    "wednesdayHours": "wednesday_hours",
    "thursdayHours": "thursday_hours",
    "fridayHours": "friday_hours",
    "saturdayHours": "saturday_hours",
    "sundayHours": "sunday_hours",
}


@dataclass(frozen=True)
class EmployeeRecord:
    emp_no: str
    name: str
    department: str
    team: str
    email: Optional[str] = None
    hours: dict[str, Optional[str]] = field(default_factory=dict)


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _items(data: Any) -> list:
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in ("employeeData", "staff"):
            if isinstance(data.get(key), list):
                return data[key]
    raise ValidationError("JSONの形式が不正です: employeeData配列が見つかりません")


def normalize_payload(data: Any) -> list[EmployeeRecord]:
    records: list[EmployeeRecord] = []
    for index, item in enumerate(_items(data), start=1):
        if not isinstance(item, dict):
            raise ValidationError(f"{index}行目: 社員データの形式が不正です")

        emp_no = _text(item.get("empNo"))
        name = _text(item.get("name"))
        if not emp_no or not name:
            raise ValidationError(f"{index}行目: empNoとnameは必須です")

        records.append(
            EmployeeRecord(
                emp_no=emp_no,
                name=name,
                department=_text(item.get("dept") or item.get("department")) or DEFAULT_DEPARTMENT,
                team=_text(item.get("team") or item.get("group")) or DEFAULT_TEAM,
                email=_text(item.get("email")) or None,
                hours={column: (_text(item.get(key)) or None) for key, column in _HOUR_KEYS.items()},
            )
        )
    return records
