from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from ..common.datetime_utils import iso_or_none
from ..core.constants import RECEPTION_KEYWORD

# Boolean duty flags per staff kind; every shape also carries a free-text "custom" duty.
GENERAL_DUTIES = ("fax", "subjectCheck")
RECEPTION_DUTIES = ("lunch", "fax", "cs")


def is_reception(department: str, team: str) -> bool:
    return RECEPTION_KEYWORD in (department or "") or RECEPTION_KEYWORD in (team or "")


def empty_duties(reception: bool) -> dict[str, Any]:
    flags = RECEPTION_DUTIES if reception else GENERAL_DUTIES
    duties: dict[str, Any] = {k: False for k in flags}
    duties["custom"] = ""
    return duties


def has_any_duty(duties: dict[str, Any]) -> bool:
    return any(v is True for v in duties.values()) or bool(str(duties.get("custom") or "").strip())


@dataclass(frozen=True)
class StaffResponsibility:
    """Per-day side duties (FAX duty, lunch cover, ...) of one staff."""

    staff_id: int
    work_date: date
    duties: dict[str, Any] = field(default_factory=dict)
    updated_by: Optional[int] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "staffId": self.staff_id,
            "date": self.work_date.isoformat(),
            "responsibilities": dict(self.duties),
            "hasResponsibilities": has_any_duty(self.duties),
            "updatedAt": iso_or_none(self.updated_at),
        }
