from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

# Column order follows date.weekday(): Monday == 0.
WEEKDAY_FIELDS = (
    "monday_hours",
    "tuesday_hours",
    "wednesday_hours",
    "thursday_hours",
    "friday_hours",
    "saturday_hours",
    "sunday_hours",
)


@dataclass(frozen=True)
class Contract:
    """Standing weekly work-hour contract. Each weekday holds "H:MM-H:MM" or nothing."""

    contract_id: int
    staff_id: int
    emp_no: Optional[str]
    name: str
    department: str
    team: str
    monday_hours: Optional[str] = None
    tuesday_hours: Optional[str] = None
    wednesday_hours: Optional[str] = None
    thursday_hours: Optional[str] = None
    friday_hours: Optional[str] = None
    saturday_hours: Optional[str] = None
    sunday_hours: Optional[str] = None

    def hours_for(self, day: date) -> Optional[str]:
        return getattr(self, WEEKDAY_FIELDS[day.weekday()])

    def to_dict(self) -> dict:
        return {
            "id": self.contract_id,
            "staffId": self.staff_id,
            "empNo": self.emp_no,
            "name": self.name,
            "dept": self.department,
            "team": self.team,
            "mondayHours": self.monday_hours,
            "tuesdayHours": self.tuesday_hours,
            "wednesdayHours": self.wednesday_hours,
            "thursdayHours": self.thursday_hours,
            "fridayHours": self.friday_hours,
            "saturdayHours": self.saturday_hours,
            "sundayHours": self.sunday_hours,
        }
