from __future__ import annotations

from datetime import date
from typing import Any, Optional, Protocol, Sequence

from .model import StaffResponsibility


class ResponsibilityRepository(Protocol):
    def get(self, staff_id: int, work_date: date) -> Optional[StaffResponsibility]:
        raise NotImplementedError

    def list_between(self, *, start: date, end: date) -> Sequence[StaffResponsibility]:
        raise NotImplementedError

    def upsert(self, *, staff_id: int, work_date: date, duties: dict[str, Any], updated_by: Optional[int]) -> None:
        """One row per (staff, date); an existing row is overwritten."""

        raise NotImplementedError
