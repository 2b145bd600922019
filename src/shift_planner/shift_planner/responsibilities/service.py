from __future__ import annotations

import calendar
import logging
from datetime import date
from typing import Any, Optional

from ..core.constants import MAX_CUSTOM_DUTY_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..staff.model import Staff
from ..staff.repository import StaffRepository
from .model import StaffResponsibility, empty_duties, has_any_duty, is_reception
from .repository import ResponsibilityRepository

logger = logging.getLogger(__name__)


class ResponsibilityService:
    """Use case: per-day side duties, shaped by whether the staff belongs to reception."""

    def __init__(self, responsibilities: ResponsibilityRepository, staff: StaffRepository):
        self._responsibilities = responsibilities
        self._staff = staff

    def _require_staff(self, staff_id: int) -> Staff:
        staff = self._staff.get_by_id(int(staff_id))
        if not staff:
            raise NotFoundError("スタッフが見つかりません")
        return staff

    @staticmethod
    def _ensure_owner(current_role: Role, current_staff_id: Optional[int], staff_id: int) -> None:
        if current_role == Role.ADMIN:
            return
        if current_staff_id is None or int(current_staff_id) != int(staff_id):
            raise AuthorizationError("他のスタッフの担当設定は変更できません")

    @staticmethod
    def normalize(staff: Staff, duties: Any) -> dict[str, Any]:
        """Coerce a client payload onto the duty shape of `staff`; keys outside the shape are refused."""

        if not isinstance(duties, dict):
            raise ValidationError("担当設定の形式が不正です")
        shaped = empty_duties(is_reception(staff.department, staff.team))
        unknown = sorted(set(duties) - set(shaped))
        if unknown:
            raise ValidationError(f"この担当設定は指定できません: {', '.join(unknown)}")

        for key, value in duties.items():
            if key == "custom":
                custom = str(value or "").strip()
                if len(custom) > MAX_CUSTOM_DUTY_LENGTH:
                    raise ValidationError(
                        f"その他の担当は{MAX_CUSTOM_DUTY_LENGTH}文字以内で入力してください"
                    )
                shaped[key] = custom
            elif isinstance(value, bool):
                shaped[key] = value
            else:
                raise ValidationError(f"{key}はtrue/falseで指定してください")
        return shaped

    def get(self, staff_id: int, work_date: date) -> StaffResponsibility:
        staff = self._require_staff(staff_id)
        found = self._responsibilities.get(staff.staff_id, work_date)
        if found:
            return found
        return StaffResponsibility(
            staff_id=staff.staff_id,
            work_date=work_date,
            duties=empty_duties(is_reception(staff.department, staff.team)),
        )

    def list_for_date(self, work_date: date) -> list[StaffResponsibility]:
        return list(self._responsibilities.list_between(start=work_date, end=work_date))

    def list_for_month(self, year: int, month: int) -> list[StaffResponsibility]:
        if not 1 <= int(month) <= 12:
            raise ValidationError("月の指定が不正です")
        last_day = calendar.monthrange(int(year), int(month))[1]
        first = date(int(year), int(month), 1)
        return list(self._responsibilities.list_between(start=first, end=first.replace(day=last_day)))

    def save(
        self,
        *,
        current_role: Role,
        current_staff_id: Optional[int],
        actor_id: Optional[int],
        staff_id: int,
        work_date: date,
        duties: Any,
    ) -> StaffResponsibility:
        staff = self._require_staff(staff_id)
        self._ensure_owner(current_role, current_staff_id, staff.staff_id)
        shaped = self.normalize(staff, duties)
        self._responsibilities.upsert(staff_id=staff.staff_id, work_date=work_date, duties=shaped, updated_by=actor_id)
        logger.info("Responsibilities saved: staff=%s date=%s", staff.staff_id, work_date)
        return self.get(staff.staff_id, work_date)

    def clear(
        self,
        *,
        current_role: Role,
        current_staff_id: Optional[int],
        actor_id: Optional[int],
        staff_id: int,
        work_date: date,
    ) -> StaffResponsibility:
        """Reset every duty of the day; the row stays with the empty shape."""

        staff = self._require_staff(staff_id)
        self._ensure_owner(current_role, current_staff_id, staff.staff_id)
        self._responsibilities.upsert(
            staff_id=staff.staff_id,
            work_date=work_date,
            duties=empty_duties(is_reception(staff.department, staff.team)),
            updated_by=actor_id,
        )
        return self.get(staff.staff_id, work_date)

    def status_for_date(self, work_date: date) -> list[dict]:
        """All active staff with their duties for the day (empty shape when nothing is stored)."""

        stored = {r.staff_id: r for r in self.list_for_date(work_date)}
        rows = []
        for s in self._staff.list_active():
            reception = is_reception(s.department, s.team)
            r = stored.get(s.staff_id)
            duties = dict(r.duties) if r else empty_duties(reception)
            rows.append(
                {
                    "staffId": s.staff_id,
                    "empNo": s.emp_no,
                    "name": s.name,
                    "department": s.department,
                    "group": s.team,
                    "isReception": reception,
                    "responsibilities": duties,
                    "hasResponsibilities": has_any_duty(duties),
                }
            )
        return rows
