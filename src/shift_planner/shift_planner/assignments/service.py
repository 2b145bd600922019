from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..audit.service import AuditService
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_SUPPORT_REASON
from ..core.enums import AuditAction
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..staff.repository import StaffRepository
from .model import TemporaryAssignment
from .repository import AssignmentRepository

logger = logging.getLogger(__name__)

MSG_OVERLAP = "指定期間に重複する支援設定が存在します"
MSG_NOT_FOUND = "支援設定が見つかりません"


class AssignmentService:
    """Use case: temporary support postings and the per-day department view they produce."""

    def __init__(self, assignments: AssignmentRepository, staff: StaffRepository, audit: AuditService):
        self._assignments = assignments
        self._staff = staff
        self._audit = audit

    def _require_staff(self, staff_id: int):
        staff = self._staff.get_by_id(int(staff_id))
        if not staff:
            raise NotFoundError("スタッフが見つかりません")
        return staff

    def _require_assignment(self, assignment_id: int) -> TemporaryAssignment:
        a = self._assignments.get(int(assignment_id))
        if not a or not a.is_active:
            raise NotFoundError(MSG_NOT_FOUND)
        return a

    def _ensure_no_overlap(self, staff_id: int, start_date: date, end_date: date, exclude_id: Optional[int] = None):
        if start_date > end_date:
            raise ValidationError("開始日は終了日以前にしてください")
        if self._assignments.find_overlapping(
            staff_id=staff_id, start_date=start_date, end_date=end_date, exclude_id=exclude_id
        ):
            raise ConflictError(MSG_OVERLAP)

    def list_for_staff(self, staff_id: int) -> list[TemporaryAssignment]:
        staff = self._require_staff(staff_id)
        return list(self._assignments.list_for_staff(staff.staff_id))

    def create(
        self,
        *,
        actor_id: Optional[int],
        staff_id: int,
        start_date: date,
        end_date: date,
        temp_department: Optional[str],
        temp_team: Optional[str],
        reason: Optional[str] = None,
    ) -> TemporaryAssignment:
        staff = self._require_staff(staff_id)
        department = require_non_empty(temp_department, "支援先部署")
        team = require_non_empty(temp_team, "支援先グループ")
        self._ensure_no_overlap(staff.staff_id, start_date, end_date)

        assignment_id = self._assignments.create(
            staff_id=staff.staff_id,
            start_date=start_date,
            end_date=end_date,
            temp_department=department,
            temp_team=team,
            reason=(reason or "").strip() or DEFAULT_SUPPORT_REASON,
            created_by=actor_id,
        )
        created = self._assignments.get(assignment_id)
        logger.info(
            "Support assignment %s: staff=%s %s..%s -> %s/%s",
            assignment_id,
            staff.staff_id,
            start_date,
            end_date,
            department,
            team,
        )
        self._audit.record(
            AuditAction.ASSIGNMENT_CREATE,
            resource="temporary_assignment",
            actor_id=actor_id,
            resource_id=assignment_id,
            details={"staffId": staff.staff_id, "startDate": start_date.isoformat(), "endDate": end_date.isoformat()},
        )
        return created

    def update(
        self,
        assignment_id: int,
        *,
        actor_id: Optional[int],
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        temp_department: Optional[str] = None,
        temp_team: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> TemporaryAssignment:
        """Partial update; omitted fields keep their stored value and the range is re-checked for overlaps."""

        a = self._require_assignment(assignment_id)
        new_start = start_date or a.start_date
        new_end = end_date or a.end_date
        department = a.temp_department if temp_department is None else require_non_empty(temp_department, "支援先部署")
        team = a.temp_team if temp_team is None else require_non_empty(temp_team, "支援先グループ")
        new_reason = (reason or "").strip() or a.reason
        self._ensure_no_overlap(a.staff_id, new_start, new_end, exclude_id=a.assignment_id)

        if not self._assignments.update(
            assignment_id=a.assignment_id,
            start_date=new_start,
            end_date=new_end,
            temp_department=department,
            temp_team=team,
            reason=new_reason,
        ):
            raise NotFoundError(MSG_NOT_FOUND)
        self._audit.record(
            AuditAction.ASSIGNMENT_UPDATE,
            resource="temporary_assignment",
            actor_id=actor_id,
            resource_id=a.assignment_id,
            details={"startDate": new_start.isoformat(), "endDate": new_end.isoformat()},
        )
        return self._assignments.get(a.assignment_id)

    def end(self, assignment_id: int, *, actor_id: Optional[int]) -> None:
        a = self._require_assignment(assignment_id)
        if not self._assignments.deactivate(a.assignment_id):
            raise NotFoundError(MSG_NOT_FOUND)
        logger.info("Support assignment %s ended (staff=%s)", a.assignment_id, a.staff_id)
        self._audit.record(
            AuditAction.ASSIGNMENT_END,
            resource="temporary_assignment",
            actor_id=actor_id,
            resource_id=a.assignment_id,
            details={"staffId": a.staff_id},
        )

    def active_for(self, staff_id: int, day: date) -> Optional[TemporaryAssignment]:
        return next((a for a in self._assignments.list_active_on(day) if a.staff_id == int(staff_id)), None)

    def support_status(self, day: date) -> list[dict]:
        """Every active staff with their home and effective department/team on `day`."""

        by_staff = {a.staff_id: a for a in self._assignments.list_active_on(day)}
        rows = []
        for s in self._staff.list_active():
            a = by_staff.get(s.staff_id)
            rows.append(
                {
                    "id": s.staff_id,
                    "empNo": s.emp_no,
                    "name": s.name,
                    "originalDept": s.department,
                    "originalGroup": s.team,
                    "currentDept": a.temp_department if a else s.department,
                    "currentGroup": a.temp_team if a else s.team,
                    "isSupporting": a is not None,
                    "supportInfo": (
                        {
                            "id": a.assignment_id,
                            "startDate": a.start_date.isoformat(),
                            "endDate": a.end_date.isoformat(),
                            "reason": a.reason,
                        }
                        if a
                        else None
                    ),
                }
            )
        return rows
