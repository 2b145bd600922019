from __future__ import annotations

from datetime import date, datetime
from typing import Callable, Iterable, Optional, Protocol, Sequence

from ..core.enums import ApprovalAction, PendingState, PendingType
from ..schedules.model import Segment
from .model import ApprovalLog, PendingSchedule

# Called with the rows already in the target (staff, date) cell; raises to abort the write.
CellGuard = Callable[[Sequence[PendingSchedule]], None]


class PendingRepository(Protocol):
    """Giao diện repository cho pending schedules.

    Writes that depend on the state of a staff x date cell take a `guard` and must run
    the read, the guard and the write atomically.
    """

    def get(self, pending_id: int) -> Optional[PendingSchedule]:
        raise NotImplementedError

    def search(
        self,
        *,
        staff_ids: Optional[Iterable[int]] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        pending_type: Optional[PendingType] = None,
        state: Optional[PendingState] = None,
        limit: int = 500,
    ) -> Sequence[PendingSchedule]:
        raise NotImplementedError

    def list_approved_for_date(self, work_date: date, *, staff_id: Optional[int] = None) -> Sequence[PendingSchedule]:
        raise NotImplementedError

    def create_in_cell(
        self,
        *,
        staff_id: int,
        work_date: date,
        segments: Sequence[Segment],
        pending_type: PendingType,
        created_by: Optional[int],
        guard: CellGuard,
        batch_id: Optional[str] = None,
    ) -> list[int]:
        raise NotImplementedError

    def update_in_cell(
        self,
        *,
        pending_id: int,
        work_date: date,
        status: str,
        start: float,
        end: float,
        memo: str,
        guard: CellGuard,
    ) -> bool:
        """Update an unresolved row; `guard` sees the target cell without this row."""

        raise NotImplementedError

    def mark_approved(self, *, pending_id: int, approved_by: int, at: datetime) -> bool:
        raise NotImplementedError

    def mark_rejected(self, *, pending_id: int, rejected_by: int, reason: str, at: datetime) -> bool:
        raise NotImplementedError

    def clear_approval(self, *, pending_id: int, at: datetime) -> bool:
        raise NotImplementedError

    def delete(self, pending_id: int) -> bool:
        """Delete unless approved."""

        raise NotImplementedError

    def delete_by_batch(self, batch_id: str) -> int:
        raise NotImplementedError

    def add_log(self, *, pending_id: int, action: ApprovalAction, actor_id: Optional[int], reason: Optional[str]) -> int:
        raise NotImplementedError

    def list_logs(self, pending_id: int) -> Sequence[ApprovalLog]:
        raise NotImplementedError
