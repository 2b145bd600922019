from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Staff:
    """スタッフ（オペレーター）。

    Soft-disabled through `is_active`; rows referenced by schedules are never deleted.
    """

    staff_id: int
    emp_no: Optional[str]
    name: str
    department: str
    team: str
    is_active: bool = True
    batch_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.staff_id,
            "empNo": self.emp_no,
            "name": self.name,
            "department": self.department,
            "group": self.team,
            "isActive": self.is_active,
        }
