from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import iso_or_none


@dataclass(frozen=True)
class TemporaryAssignment:
    """Temporary support posting: the staff works for another department/team over an inclusive date range.

    Ending an assignment only clears `is_active`; the row stays for history.
    """

    assignment_id: int
    staff_id: int
    start_date: date
    end_date: date
    temp_department: str
    temp_team: str
    reason: str
    is_active: bool = True
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def covers(self, day: date) -> bool:
        return self.is_active and self.start_date <= day <= self.end_date

    def to_dict(self) -> dict:
        return {
            "id": self.assignment_id,
            "staffId": self.staff_id,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "tempDept": self.temp_department,
            "tempGroup": self.temp_team,
            "reason": self.reason,
            "isActive": self.is_active,
            "createdAt": iso_or_none(self.created_at),
            "updatedAt": iso_or_none(self.updated_at),
        }
