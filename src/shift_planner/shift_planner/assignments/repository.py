from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import TemporaryAssignment


class AssignmentRepository(Protocol):
    def get(self, assignment_id: int) -> Optional[TemporaryAssignment]:
        raise NotImplementedError

    def list_for_staff(self, staff_id: int) -> Sequence[TemporaryAssignment]:
        """Active assignments of one staff, newest start date first."""

        raise NotImplementedError

    def find_overlapping(
        self,
        *,
        staff_id: int,
        start_date: date,
        end_date: date,
        exclude_id: Optional[int] = None,
    ) -> Sequence[TemporaryAssignment]:
        raise NotImplementedError

    def list_active_on(self, day: date) -> Sequence[TemporaryAssignment]:
        raise NotImplementedError

    def create(
        self,
        *,
        staff_id: int,
        start_date: date,
        end_date: date,
        temp_department: str,
        temp_team: str,
        reason: str,
        created_by: Optional[int],
    ) -> int:
        raise NotImplementedError

    def update(
        self,
        *,
        assignment_id: int,
        start_date: date,
        end_date: date,
        temp_department: str,
        temp_team: str,
        reason: str,
    ) -> bool:
        raise NotImplementedError

    def deactivate(self, assignment_id: int) -> bool:
        raise NotImplementedError
