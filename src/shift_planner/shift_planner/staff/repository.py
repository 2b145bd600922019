from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from .model import Staff


class StaffRepository(Protocol):
    def get_by_id(self, staff_id: int) -> Optional[Staff]:
        raise NotImplementedError

    def get_by_emp_no(self, emp_no: str) -> Optional[Staff]:
        raise NotImplementedError

    def list_active(self) -> Sequence[Staff]:
        """Active staff ordered by employee number (missing numbers last)."""

        raise NotImplementedError

    def list_all(self) -> Sequence[Staff]:
        raise NotImplementedError

    def create(
        self,
        *,
        emp_no: Optional[str],
        name: str,
        department: str,
        team: str,
        batch_id: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update(self, *, staff_id: int, name: str, department: str, team: str, is_active: bool = True) -> bool:
        raise NotImplementedError

    def deactivate_missing(self, *, keep_emp_nos: Iterable[str]) -> int:
        """Soft-disable active staff whose employee number is not in `keep_emp_nos`."""

        raise NotImplementedError

    def set_active(self, staff_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError

    def list_by_batch(self, batch_id: str) -> Sequence[Staff]:
        raise NotImplementedError

    def is_referenced(self, staff_id: int) -> bool:
        """True when schedules, pending entries, logins, support postings or duties still point at the staff row."""

        raise NotImplementedError

    def delete(self, staff_id: int) -> bool:
        raise NotImplementedError
