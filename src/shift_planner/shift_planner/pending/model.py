from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import iso_or_none
from ..core.enums import ApprovalAction, Layer, PendingState, PendingType
from ..schedules.model import ScheduleEntry


@dataclass(frozen=True)
class PendingSchedule:
    """Proposed schedule entry awaiting approval.

    State is derived: approved_at set -> APPROVED, rejected_at set -> REJECTED, else PENDING.
    """

    pending_id: int
    staff_id: int
    work_date: date
    status: str
    start: float
    end: float
    memo: str
    pending_type: PendingType
    created_at: datetime
    updated_at: datetime
    created_by: Optional[int] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejected_by: Optional[int] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    batch_id: Optional[str] = None

    @property
    def state(self) -> PendingState:
        if self.approved_at is not None:
            return PendingState.APPROVED
        if self.rejected_at is not None:
            return PendingState.REJECTED
        return PendingState.PENDING

    def to_entry(self) -> ScheduleEntry:
        return ScheduleEntry(
            entry_id=f"pending_{self.pending_id}",
            staff_id=self.staff_id,
            work_date=self.work_date,
            status=self.status,
            start=self.start,
            end=self.end,
            memo=self.memo or "",
            layer=Layer.ADJUSTMENT,
            updated_at=self.updated_at,
            approved_at=self.approved_at,
        )

    def to_dict(self, *, staff_name: Optional[str] = None) -> dict:
        return {
            "id": self.pending_id,
            "staffId": self.staff_id,
            "staffName": staff_name,
            "date": self.work_date.isoformat(),
            "status": self.status,
            "start": self.start,
            "end": self.end,
            "memo": self.memo or "",
            "isPending": True,
            "pendingType": self.pending_type.value,
            "state": self.state.value,
            "approvedBy": self.approved_by,
            "approvedAt": iso_or_none(self.approved_at),
            "rejectedBy": self.rejected_by,
            "rejectedAt": iso_or_none(self.rejected_at),
            "rejectionReason": self.rejection_reason,
            "createdAt": iso_or_none(self.created_at),
            "updatedAt": iso_or_none(self.updated_at),
        }


@dataclass(frozen=True)
class ApprovalLog:
    log_id: int
    pending_id: int
    action: ApprovalAction
    actor_id: Optional[int]
    reason: Optional[str]
    created_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.log_id,
            "pendingId": self.pending_id,
            "action": self.action.value,
            "actorId": self.actor_id,
            "reason": self.reason,
            "createdAt": iso_or_none(self.created_at),
        }
