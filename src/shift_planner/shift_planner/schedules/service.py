from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..contracts.generator import contract_entries, contract_entries_for_day
from ..contracts.repository import ContractRepository
from ..common.validators import require_non_empty, require_time_range
from ..core.exceptions import NotFoundError, ValidationError
from ..holidays.service import HolidayService
from ..pending.service import PendingService
from ..staff.model import Staff
from ..staff.repository import StaffRepository
from .layers import resolve_day, resolve_many
from .model import Adjustment, ScheduleEntry
from .repository import AdjustmentRepository

logger = logging.getLogger(__name__)


class ScheduleService:
    """Use case: build the layered day view and edit the adjustment layer."""

    def __init__(
        self,
        staff: StaffRepository,
        contracts: ContractRepository,
        adjustments: AdjustmentRepository,
        holidays: HolidayService,
        pending: PendingService,
    ):
        self._staff = staff
        self._contracts = contracts
        self._adjustments = adjustments
        self._holidays = holidays
        self._pending = pending

    def _active_staff(self, staff_id: int) -> Staff:
        staff = self._staff.get_by_id(int(staff_id))
        if not staff or not staff.is_active:
            raise NotFoundError("スタッフが見つかりません")
        return staff

    def _raw_entries(self, work_date: date, *, staff_id: Optional[int] = None) -> list[ScheduleEntry]:
        entries = [ScheduleEntry.from_adjustment(a) for a in self._adjustments.list_for_date(work_date, staff_id=staff_id)]
        entries.extend(p.to_entry() for p in self._pending.approved_for_date(work_date, staff_id=staff_id))
        return entries

    # -------- views --------
    def day_entries(self, *, staff_id: int, work_date: date) -> list[ScheduleEntry]:
        """Resolved entries for one staff member on one day (holiday-filtered, paint order)."""

        staff = self._active_staff(staff_id)
        entries = contract_entries_for_day(staff, self._contracts.get_for_staff(staff.staff_id), work_date)
        entries.extend(self._raw_entries(work_date, staff_id=staff.staff_id))
        return resolve_day(entries, work_date=work_date, holidays=self._holidays.dates_between(work_date, work_date))

    def layered(self, *, work_date: date) -> dict:
        staff = list(self._staff.list_active())
        active_ids = {s.staff_id for s in staff}
        contracts = self._contracts.list_for_staff_ids(active_ids)

        entries = contract_entries(staff, contracts, work_date)
        entries.extend(e for e in self._raw_entries(work_date) if e.staff_id in active_ids)
        resolved = resolve_many(entries, holidays=self._holidays.dates_between(work_date, work_date))

        return {
            "date": work_date.isoformat(),
            "staff": [s.to_dict() for s in staff],
            "schedules": [e.to_dict() for e in resolved],
        }

    def unified(self, *, staff_id: int, work_date: date, include_masking: bool = False) -> dict:
        entries = self.day_entries(staff_id=staff_id, work_date=work_date)
        return {
            "staffId": int(staff_id),
            "date": work_date.isoformat(),
            "isHoliday": self._holidays.is_holiday(work_date),
            "schedules": [e.to_dict(mask_memo=include_masking) for e in entries],
        }

    # -------- adjustment CRUD --------
    def get_adjustment(self, adjustment_id: int) -> Adjustment:
        adj = self._adjustments.get(int(adjustment_id))
        if not adj:
            raise NotFoundError("予定が見つかりません")
        return adj

    def create_adjustment(
        self,
        *,
        staff_id: int,
        work_date: date,
        status: str,
        start,
        end,
        memo: str = "",
        batch_id: Optional[str] = None,
    ) -> Adjustment:
        staff = self._active_staff(staff_id)
        status = require_non_empty(status, "ステータス")
        start_h, end_h = require_time_range(start, end)

        adjustment_id = self._adjustments.create(
            staff_id=staff.staff_id,
            work_date=work_date,
            status=status,
            start=start_h,
            end=end_h,
            memo=(memo or "").strip(),
            batch_id=batch_id,
        )
        logger.debug("Adjustment %s created for staff=%s date=%s", adjustment_id, staff.staff_id, work_date)
        return self.get_adjustment(adjustment_id)

    def update_adjustment(self, *, adjustment_id: int, changes: dict) -> Adjustment:
        adj = self.get_adjustment(adjustment_id)
        status = require_non_empty(changes.get("status", adj.status), "ステータス")
        start_h, end_h = require_time_range(changes.get("start", adj.start), changes.get("end", adj.end))
        work_date = changes.get("date", adj.work_date)
        memo = str(changes.get("memo", adj.memo) or "").strip()

        if not self._adjustments.update(
            adjustment_id=adj.adjustment_id,
            work_date=work_date,
            status=status,
            start=start_h,
            end=end_h,
            memo=memo,
        ):
            raise ValidationError("予定の更新に失敗しました")
        return self.get_adjustment(adj.adjustment_id)

    def delete_adjustment(self, adjustment_id: int) -> None:
        adj = self.get_adjustment(adjustment_id)
        if not self._adjustments.delete(adj.adjustment_id):
            raise NotFoundError("予定が見つかりません")
