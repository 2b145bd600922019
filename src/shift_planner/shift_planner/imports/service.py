"""Bulk imports: staff sync from JSON and schedule rows from CSV.

Every row created by one call carries the same batch id so the whole import can
be rolled back within ROLLBACK_WINDOW.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Callable, Iterable, Optional

from ..audit.service import AuditService
from ..common.datetime_utils import now_local
from ..contracts.repository import ContractRepository
from ..core.constants import DEFAULT_HISTORY_LIMIT, ROLLBACK_WINDOW
from ..core.enums import AuditAction
from ..core.exceptions import ConflictError, ImportValidationError, NotFoundError, ValidationError
from ..pending.repository import PendingRepository
from ..schedules.repository import AdjustmentRepository
from ..staff.repository import StaffRepository
from .charset import validate_records
from .model import ImportKind
from .parser import parse_csv, parse_schedule_rows
from .records import normalize_payload
from .repository import ImportBatchRepository

logger = logging.getLogger(__name__)


class ImportService:
    def __init__(
        self,
        batches: ImportBatchRepository,
        staff: StaffRepository,
        contracts: ContractRepository,
        adjustments: AdjustmentRepository,
        pending: PendingRepository,
        audit: AuditService,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._batches = batches
        self._staff = staff
        self._contracts = contracts
        self._adjustments = adjustments
        self._pending = pending
        self._audit = audit
        self._clock = clock

    def _open_batch(self, kind: ImportKind, actor_id: Optional[int]) -> str:
        batch_id = str(uuid.uuid4())
        self._batches.create(batch_id=batch_id, kind=kind, created_by=actor_id, created_at=self._clock())
        return batch_id

    # ----------------------------
    # Staff sync
    # ----------------------------

    def sync_staff(self, payload: Any, *, actor_id: Optional[int] = None) -> dict:
        records = normalize_payload(payload)
        if not records:
            raise ValidationError("社員データが空です")

        errors = validate_records(records)
        if errors:
            raise ImportValidationError("サポートされていない文字が含まれています", errors)

        emp_nos = [r.emp_no for r in records]
        duplicates = sorted({e for e in emp_nos if emp_nos.count(e) > 1})
        if duplicates:
            raise ValidationError(f"社員番号が重複しています: {', '.join(duplicates)}")

        batch_id = self._open_batch(ImportKind.STAFF, actor_id)
        added = updated = 0
        for rec in records:
            existing = self._staff.get_by_emp_no(rec.emp_no)
            if existing:
                self._staff.update(
                    staff_id=existing.staff_id,
                    name=rec.name,
                    department=rec.department,
                    team=rec.team,
                    is_active=True,
                )
                staff_id = existing.staff_id
                updated += 1
            else:
                staff_id = self._staff.create(
                    emp_no=rec.emp_no,
                    name=rec.name,
                    department=rec.department,
                    team=rec.team,
                    batch_id=batch_id,
                )
                added += 1

            self._contracts.upsert(
                staff_id=staff_id,
                emp_no=rec.emp_no,
                name=rec.name,
                department=rec.department,
                team=rec.team,
                hours=rec.hours,
            )

        deactivated = self._staff.deactivate_missing(keep_emp_nos=emp_nos)
        self._batches.set_row_count(batch_id, added)

        result = {
            "batchId": batch_id,
            "total": len(records),
            "added": added,
            "updated": updated,
            "deactivated": deactivated,
        }
        logger.info("Staff sync %s: %s", batch_id, result)
        self._audit.record(AuditAction.IMPORT, resource="staff", actor_id=actor_id, resource_id=batch_id, details=result)
        return result

    # ----------------------------
    # Schedule CSV
    # ----------------------------

    def import_schedules(self, csv_text: str, *, actor_id: Optional[int] = None) -> dict:
        return self.import_schedule_rows(parse_csv(csv_text), actor_id=actor_id)

    def import_schedule_rows(self, rows: Iterable[dict], *, actor_id: Optional[int] = None) -> dict:
        parsed, errors = parse_schedule_rows(rows)
        if errors:
            raise ImportValidationError("CSVの内容に誤りがあります", errors)
        if not parsed:
            raise ValidationError("取り込むデータがありません")

        batch_id = self._open_batch(ImportKind.SCHEDULES, actor_id)
        imported = skipped = 0
        details: list[dict] = []
        for row in parsed:
            staff = self._staff.get_by_emp_no(row.emp_no)
            if staff is None or not staff.is_active:
                skipped += 1
                details.append({"row": row.row, "empNo": row.emp_no, "action": "skipped", "error": "スタッフが見つかりません"})
                continue

            if not row.has_schedule:
                details.append({"row": row.row, "empNo": row.emp_no, "action": "empty"})
                continue

            adjustment_id = self._adjustments.create(
                staff_id=staff.staff_id,
                work_date=row.work_date,
                status=row.status or "",
                start=float(row.start),
                end=float(row.end),
                memo=row.memo,
                batch_id=batch_id,
            )
            imported += 1
            details.append({"row": row.row, "empNo": row.emp_no, "action": "created", "id": adjustment_id})

        self._batches.set_row_count(batch_id, imported)
        summary = {"batchId": batch_id, "imported": imported, "skipped": skipped}
        logger.info("Schedule import %s: %s", batch_id, summary)
        self._audit.record(AuditAction.IMPORT, resource="schedules", actor_id=actor_id, resource_id=batch_id, details=summary)
        return {**summary, "details": details}

    # ----------------------------
    # History / rollback
    # ----------------------------

    def history(self, *, limit: int = DEFAULT_HISTORY_LIMIT) -> list[dict]:
        now = self._clock()
        return [b.to_dict(now=now) for b in self._batches.list_recent(limit=limit)]

    def rollback(self, batch_id: str, *, actor_id: Optional[int] = None) -> dict:
        batch_id = (batch_id or "").strip()
        if not batch_id:
            raise ValidationError("batchIdは必須です")

        batch = self._batches.get(batch_id)
        if batch is None:
            raise NotFoundError("インポート履歴が見つかりません")
        if batch.rolled_back_at is not None:
            raise ConflictError("このインポートは既にロールバックされています")

        now = self._clock()
        if now - batch.created_at >= ROLLBACK_WINDOW:
            raise ConflictError("インポートから24時間以上経過しているためロールバックできません")

        deleted_adjustments = self._adjustments.delete_by_batch(batch_id)
        deleted_pending = self._pending.delete_by_batch(batch_id)

        deleted_staff = disabled_staff = 0
        for staff in self._staff.list_by_batch(batch_id):
            if self._staff.is_referenced(staff.staff_id):
                self._staff.set_active(staff.staff_id, is_active=False)
                disabled_staff += 1
            else:
                self._staff.delete(staff.staff_id)
                deleted_staff += 1

        self._batches.mark_rolled_back(batch_id, at=now)
        result = {
            "batchId": batch_id,
            "deletedSchedules": deleted_adjustments,
            "deletedPending": deleted_pending,
            "deletedStaff": deleted_staff,
            "deactivatedStaff": disabled_staff,
        }
        logger.info("Rolled back import %s: %s", batch_id, result)
        self._audit.record(
            AuditAction.IMPORT_ROLLBACK, resource="import", actor_id=actor_id, resource_id=batch_id, details=result
        )
        return result
