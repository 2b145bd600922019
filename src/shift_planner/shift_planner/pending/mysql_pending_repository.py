from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..core.enums import ApprovalAction, PendingState, PendingType
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, to_hour
from ..schedules.model import Segment
from .model import ApprovalLog, PendingSchedule
from .repository import CellGuard, PendingRepository

_COLUMNS = """
    id, staff_id, work_date, status, start_hour, end_hour, memo, pending_type,
    created_by, approved_by, approved_at, rejected_by, rejected_at, rejection_reason,
    batch_id, created_at, updated_at
"""


def _row_to_pending(r: dict) -> PendingSchedule:
    return PendingSchedule(
        pending_id=int(r["id"]),
        staff_id=int(r["staff_id"]),
        work_date=r["work_date"],
        status=r["status"],
        start=to_hour(r["start_hour"]),
        end=to_hour(r["end_hour"]),
        memo=r.get("memo") or "",
        pending_type=PendingType(r["pending_type"]),
        created_at=r["created_at"],
        updated_at=r["updated_at"],
        created_by=r.get("created_by"),
        approved_by=r.get("approved_by"),
        approved_at=r.get("approved_at"),
        rejected_by=r.get("rejected_by"),
        rejected_at=r.get("rejected_at"),
        rejection_reason=r.get("rejection_reason"),
        batch_id=r.get("batch_id"),
    )


_STATE_CLAUSES = {
    PendingState.APPROVED: "approved_at IS NOT NULL",
    PendingState.REJECTED: "approved_at IS NULL AND rejected_at IS NOT NULL",
    PendingState.PENDING: "approved_at IS NULL AND rejected_at IS NULL",
}


class MySQLPendingRepository(PendingRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, pending_id: int) -> Optional[PendingSchedule]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM pending_schedules WHERE id=%s", (int(pending_id),))
            r = fetchone(cur)
            return _row_to_pending(r) if r else None

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
        clauses = ["1=1"]
        params: list[object] = []

        if staff_ids is not None:
            ids = [int(i) for i in staff_ids]
            if not ids:
                return []
            clauses.append(f"staff_id IN ({in_clause(ids)})")
            params.extend(ids)
        if date_from is not None:
            clauses.append("work_date >= %s")
            params.append(date_from)
        if date_to is not None:
            clauses.append("work_date <= %s")
            params.append(date_to)
        if pending_type is not None:
            clauses.append("pending_type=%s")
            params.append(pending_type.value)
        if state is not None:
            clauses.append(_STATE_CLAUSES[state])

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM pending_schedules
                WHERE {where}
                ORDER BY work_date, staff_id, start_hour, id
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_row_to_pending(r) for r in fetchall(cur)]

    def list_approved_for_date(self, work_date: date, *, staff_id: Optional[int] = None) -> Sequence[PendingSchedule]:
        staff_ids = [int(staff_id)] if staff_id is not None else None
        return self.search(staff_ids=staff_ids, date_from=work_date, date_to=work_date, state=PendingState.APPROVED)

    @staticmethod
    def _lock_cell(cur, *, staff_id: int, work_date: date, exclude_id: Optional[int] = None) -> list[PendingSchedule]:
        # The staff row lock serializes concurrent writers to any of that staff member's cells.
        cur.execute("SELECT id FROM staff WHERE id=%s FOR UPDATE", (int(staff_id),))
        if not fetchone(cur):
            raise NotFoundError("スタッフが見つかりません")

        cur.execute(
            f"SELECT {_COLUMNS} FROM pending_schedules WHERE staff_id=%s AND work_date=%s",
            (int(staff_id), work_date),
        )
        rows = [_row_to_pending(r) for r in fetchall(cur)]
        return [r for r in rows if r.pending_id != exclude_id]

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
        with db_cursor(self._conn_factory) as (_, cur):
            guard(self._lock_cell(cur, staff_id=staff_id, work_date=work_date))

            ids: list[int] = []
            for seg in segments:
                cur.execute(
                    """
                    INSERT INTO pending_schedules(
                        staff_id, work_date, status, start_hour, end_hour, memo, pending_type, created_by, batch_id
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(staff_id),
                        work_date,
                        seg.status,
                        seg.start,
                        seg.end,
                        seg.memo or "",
                        pending_type.value,
                        created_by,
                        batch_id,
                    ),
                )
                ids.append(int(cur.lastrowid))
            return ids

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT staff_id FROM pending_schedules WHERE id=%s", (int(pending_id),))
            r = fetchone(cur)
            if not r:
                return False

            guard(self._lock_cell(cur, staff_id=int(r["staff_id"]), work_date=work_date, exclude_id=int(pending_id)))

            cur.execute(
                """
                UPDATE pending_schedules
                SET work_date=%s, status=%s, start_hour=%s, end_hour=%s, memo=%s, updated_at=NOW()
                WHERE id=%s AND approved_at IS NULL AND rejected_at IS NULL
                """,
                (work_date, status, start, end, memo or "", int(pending_id)),
            )
            return cur.rowcount > 0

    def mark_approved(self, *, pending_id: int, approved_by: int, at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE pending_schedules
                SET approved_by=%s, approved_at=%s,
                    rejected_by=NULL, rejected_at=NULL, rejection_reason=NULL,
                    updated_at=%s
                WHERE id=%s AND approved_at IS NULL
                """,
                (int(approved_by), at, at, int(pending_id)),
            )
            return cur.rowcount > 0

    def mark_rejected(self, *, pending_id: int, rejected_by: int, reason: str, at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE pending_schedules
                SET rejected_by=%s, rejected_at=%s, rejection_reason=%s, updated_at=%s
                WHERE id=%s AND approved_at IS NULL AND rejected_at IS NULL
                """,
                (int(rejected_by), at, reason, at, int(pending_id)),
            )
            return cur.rowcount > 0

    def clear_approval(self, *, pending_id: int, at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE pending_schedules
                SET approved_by=NULL, approved_at=NULL, updated_at=%s
                WHERE id=%s AND approved_at IS NOT NULL
                """,
                (at, int(pending_id)),
            )
            return cur.rowcount > 0

    def delete(self, pending_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM pending_schedules WHERE id=%s AND approved_at IS NULL", (int(pending_id),))
            return cur.rowcount > 0

    def delete_by_batch(self, batch_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM pending_schedules WHERE batch_id=%s", (batch_id,))
            return int(cur.rowcount)

    def add_log(self, *, pending_id: int, action: ApprovalAction, actor_id: Optional[int], reason: Optional[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO pending_approval_logs(pending_id, action, actor_id, reason)
                VALUES(%s,%s,%s,%s)
                """,
                (int(pending_id), action.value, actor_id, reason),
            )
            return int(cur.lastrowid)

    def list_logs(self, pending_id: int) -> Sequence[ApprovalLog]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, pending_id, action, actor_id, reason, created_at
                FROM pending_approval_logs
                WHERE pending_id=%s
                ORDER BY created_at, id
                """,
                (int(pending_id),),
            )
            return [
                ApprovalLog(
                    log_id=int(r["id"]),
                    pending_id=int(r["pending_id"]),
                    action=ApprovalAction(r["action"]),
                    actor_id=r.get("actor_id"),
                    reason=r.get("reason"),
                    created_at=r["created_at"],
                )
                for r in fetchall(cur)
            ]
