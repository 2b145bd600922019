from __future__ import annotations

import calendar
import logging
from datetime import date, datetime
from typing import Callable, Iterable, Optional, Sequence

from ..audit.service import AuditService
from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty, require_time_range
from ..core.enums import ApprovalAction, AuditAction, PendingState, PendingType, Role
from ..core.exceptions import AuthorizationError, ConflictError, DomainError, NotFoundError, ValidationError
from ..schedules.model import Segment
from ..staff.repository import StaffRepository
from .model import ApprovalLog, PendingSchedule
from .repository import PendingRepository

logger = logging.getLogger(__name__)

MSG_CELL_APPROVED = "承認済み予定があるため編集できません"
MSG_CELL_PENDING = "既にpending予定が設定されています"


def ensure_no_approved(rows: Sequence[PendingSchedule]) -> None:
    if any(r.state is PendingState.APPROVED for r in rows):
        raise ConflictError(MSG_CELL_APPROVED)


def ensure_cell_free(rows: Sequence[PendingSchedule]) -> None:
    """A staff x date cell takes at most one unresolved entry and no edits once approved."""

    ensure_no_approved(rows)
    if any(r.state is PendingState.PENDING for r in rows):
        raise ConflictError(MSG_CELL_PENDING)


def normalize_segments(raw: Iterable[dict]) -> list[Segment]:
    segments = []
    for item in raw:
        seg = Segment.from_dict(item)
        status = require_non_empty(seg.status, "ステータス")
        start, end = require_time_range(seg.start, seg.end)
        segments.append(Segment(status=status, start=start, end=end, memo=seg.memo))
    if not segments:
        raise ValidationError("予定が指定されていません")
    return segments


class PendingService:
    """Use case: monthly-plan submissions and their approval workflow."""

    def __init__(
        self,
        pending: PendingRepository,
        staff: StaffRepository,
        audit: AuditService,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._pending = pending
        self._staff = staff
        self._audit = audit
        self._clock = clock

    # -------- helpers --------
    def _get(self, pending_id: int) -> PendingSchedule:
        p = self._pending.get(int(pending_id))
        if not p:
            raise NotFoundError("予定が見つかりません")
        return p

    @staticmethod
    def _ensure_owner(current_role: Role, current_staff_id: Optional[int], staff_id: int) -> None:
        if current_role == Role.ADMIN:
            return
        if current_staff_id is None or int(current_staff_id) != int(staff_id):
            raise AuthorizationError("他のスタッフの予定は操作できません")

    def _log(self, p: PendingSchedule, action: ApprovalAction, actor_id: int, reason: Optional[str]) -> None:
        self._pending.add_log(pending_id=p.pending_id, action=action, actor_id=actor_id, reason=reason)

    # -------- submissions --------
    def submit(
        self,
        *,
        current_role: Role,
        current_staff_id: Optional[int],
        actor_id: Optional[int],
        staff_id: int,
        work_date: date,
        segments: Iterable[dict],
        pending_type: PendingType = PendingType.MONTHLY_PLANNER,
    ) -> list[PendingSchedule]:
        """Submit one cell. A composite (multi-segment) entry is checked once and stored per segment."""

        self._ensure_owner(current_role, current_staff_id, staff_id)
        staff = self._staff.get_by_id(int(staff_id))
        if not staff or not staff.is_active:
            raise NotFoundError("スタッフが見つかりません")

        normalized = normalize_segments(segments)
        ids = self._pending.create_in_cell(
            staff_id=staff.staff_id,
            work_date=work_date,
            segments=normalized,
            pending_type=pending_type,
            created_by=actor_id,
            guard=ensure_cell_free,
        )
        created = [self._get(i) for i in ids]
        for p in created:
            self._log(p, ApprovalAction.PENDING, actor_id, None)
        logger.info("Pending submitted staff=%s date=%s segments=%d", staff.staff_id, work_date, len(created))
        return created

    def update(
        self,
        *,
        current_role: Role,
        current_staff_id: Optional[int],
        pending_id: int,
        changes: dict,
    ) -> PendingSchedule:
        p = self._get(pending_id)
        self._ensure_owner(current_role, current_staff_id, p.staff_id)
        if p.state is not PendingState.PENDING:
            raise ConflictError("承認済み・却下済みの予定は編集できません")

        work_date = changes.get("date", p.work_date)
        status = require_non_empty(changes.get("status", p.status), "ステータス")
        start, end = require_time_range(changes.get("start", p.start), changes.get("end", p.end))
        memo = str(changes.get("memo", p.memo) or "")

        # Sibling segments of a composite entry share the cell, so a same-day edit only checks for approvals.
        guard = ensure_cell_free if work_date != p.work_date else ensure_no_approved

        ok = self._pending.update_in_cell(
            pending_id=p.pending_id,
            work_date=work_date,
            status=status,
            start=start,
            end=end,
            memo=memo,
            guard=guard,
        )
        if not ok:
            raise ConflictError("予定の状態が変更されたため更新できません")
        return self._get(p.pending_id)

    def delete(self, *, current_role: Role, current_staff_id: Optional[int], actor_id: int, pending_id: int) -> None:
        p = self._get(pending_id)
        self._ensure_owner(current_role, current_staff_id, p.staff_id)
        if p.state is PendingState.APPROVED:
            raise ConflictError("承認済みの予定は削除できません。先に承認を取り消してください")
        if not self._pending.delete(p.pending_id):
            raise ConflictError("予定の状態が変更されたため削除できません")
        logger.info("Pending %s deleted by %s", p.pending_id, actor_id)

    # -------- transitions --------
    def approve(self, *, actor_id: int, pending_id: int, reason: Optional[str] = None) -> PendingSchedule:
        p = self._get(pending_id)
        if p.state is PendingState.APPROVED:
            raise ConflictError("既に承認済みです")

        note = (reason or "").strip() or None
        if not self._pending.mark_approved(pending_id=p.pending_id, approved_by=int(actor_id), at=self._clock()):
            raise ConflictError("既に承認済みです")

        self._log(p, ApprovalAction.APPROVED, actor_id, note)
        self._audit.record(
            AuditAction.PENDING_APPROVE,
            resource="pending_schedule",
            actor_id=actor_id,
            resource_id=p.pending_id,
            details={"reason": note, "previousState": p.state.value},
        )
        return self._get(p.pending_id)

    def reject(self, *, actor_id: int, pending_id: int, reason: Optional[str]) -> PendingSchedule:
        reason = require_non_empty(reason, "却下理由")
        p = self._get(pending_id)
        if p.state is not PendingState.PENDING:
            raise ConflictError("承認待ちの予定のみ却下できます")

        if not self._pending.mark_rejected(
            pending_id=p.pending_id, rejected_by=int(actor_id), reason=reason, at=self._clock()
        ):
            raise ConflictError("承認待ちの予定のみ却下できます")

        self._log(p, ApprovalAction.REJECTED, actor_id, reason)
        self._audit.record(
            AuditAction.PENDING_REJECT,
            resource="pending_schedule",
            actor_id=actor_id,
            resource_id=p.pending_id,
            details={"reason": reason},
        )
        return self._get(p.pending_id)

    def unapprove(self, *, actor_id: int, pending_id: int, reason: Optional[str]) -> PendingSchedule:
        reason = require_non_empty(reason, "取消理由")
        p = self._get(pending_id)
        if p.state is not PendingState.APPROVED:
            raise ConflictError("承認済みの予定のみ承認を取り消せます")

        if not self._pending.clear_approval(pending_id=p.pending_id, at=self._clock()):
            raise ConflictError("承認済みの予定のみ承認を取り消せます")

        self._log(p, ApprovalAction.UNAPPROVED, actor_id, reason)
        self._audit.record(
            AuditAction.PENDING_UNAPPROVE,
            resource="pending_schedule",
            actor_id=actor_id,
            resource_id=p.pending_id,
            details={"reason": reason},
        )
        return self._get(p.pending_id)

    def bulk_decide(self, *, actor_id: int, pending_ids: Iterable[int], action: str, reason: Optional[str] = None) -> dict:
        if action not in {"approve", "reject"}:
            raise ValidationError("actionはapproveまたはrejectを指定してください")
        if action == "reject":
            require_non_empty(reason, "却下理由")

        successes: list[int] = []
        errors: list[dict] = []
        for raw_id in pending_ids:
            try:
                pid = int(raw_id)
                if action == "approve":
                    self.approve(actor_id=actor_id, pending_id=pid, reason=reason)
                else:
                    self.reject(actor_id=actor_id, pending_id=pid, reason=reason)
                successes.append(pid)
            except (DomainError, TypeError, ValueError) as e:
                errors.append({"id": raw_id, "message": str(e)})

        return {
            "successCount": len(successes),
            "errorCount": len(errors),
            "successes": successes,
            "errors": errors,
        }

    # -------- queries --------
    def search(
        self,
        *,
        staff_id: Optional[int] = None,
        department: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        pending_type: Optional[PendingType] = None,
        state: Optional[PendingState] = None,
    ) -> list[dict]:
        staff_by_id = {s.staff_id: s for s in self._staff.list_all()}

        staff_ids: Optional[list[int]] = None
        if staff_id is not None:
            staff_ids = [int(staff_id)]
        if department:
            dept_ids = [s.staff_id for s in staff_by_id.values() if s.department == department]
            staff_ids = dept_ids if staff_ids is None else [i for i in staff_ids if i in dept_ids]

        rows = self._pending.search(
            staff_ids=staff_ids,
            date_from=date_from,
            date_to=date_to,
            pending_type=pending_type,
            state=state,
        )
        return [p.to_dict(staff_name=getattr(staff_by_id.get(p.staff_id), "name", None)) for p in rows]

    def list_for_month(self, *, year: int, month: int) -> list[dict]:
        if not 1 <= int(month) <= 12:
            raise ValidationError("月の指定が不正です")
        last_day = calendar.monthrange(int(year), int(month))[1]
        return self.search(
            date_from=date(int(year), int(month), 1),
            date_to=date(int(year), int(month), last_day),
        )

    def approved_for_date(self, work_date: date, *, staff_id: Optional[int] = None) -> list[PendingSchedule]:
        return list(self._pending.list_approved_for_date(work_date, staff_id=staff_id))

    def history(
        self, pending_id: int, *, current_role: Optional[Role] = None, current_staff_id: Optional[int] = None
    ) -> list[ApprovalLog]:
        """Approval log of one entry; pass the caller's role to restrict staff users to their own cells."""

        p = self._get(pending_id)
        if current_role is not None:
            self._ensure_owner(current_role, current_staff_id, p.staff_id)
        return list(self._pending.list_logs(p.pending_id))
