from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_hour
from .model import Adjustment
from .repository import AdjustmentRepository

_COLUMNS = "id, staff_id, work_date, status, start_hour, end_hour, memo, batch_id, created_at, updated_at"


def _row_to_adjustment(r: dict) -> Adjustment:
    return Adjustment(
        adjustment_id=int(r["id"]),
        staff_id=int(r["staff_id"]),
        work_date=r["work_date"],
        status=r["status"],
        start=to_hour(r["start_hour"]),
        end=to_hour(r["end_hour"]),
        memo=r.get("memo") or "",
        created_at=r["created_at"],
        updated_at=r["updated_at"],
        batch_id=r.get("batch_id"),
    )


class MySQLAdjustmentRepository(AdjustmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, adjustment_id: int) -> Optional[Adjustment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM adjustments WHERE id=%s", (int(adjustment_id),))
            r = fetchone(cur)
            return _row_to_adjustment(r) if r else None

    def list_for_date(self, work_date: date, *, staff_id: Optional[int] = None) -> Sequence[Adjustment]:
        clauses = ["work_date=%s"]
        params: list[object] = [work_date]
        if staff_id is not None:
            clauses.append("staff_id=%s")
            params.append(int(staff_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM adjustments
                WHERE {where}
                ORDER BY staff_id, updated_at, id
                """,
                tuple(params),
            )
            return [_row_to_adjustment(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        staff_id: int,
        work_date: date,
        status: str,
        start: float,
        end: float,
        memo: str = "",
        batch_id: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO adjustments(staff_id, work_date, status, start_hour, end_hour, memo, batch_id)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(staff_id), work_date, status, start, end, memo or "", batch_id),
            )
            return int(cur.lastrowid)

    def update(
        self,
        *,
        adjustment_id: int,
        work_date: date,
        status: str,
        start: float,
        end: float,
        memo: str,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE adjustments
                SET work_date=%s, status=%s, start_hour=%s, end_hour=%s, memo=%s, updated_at=NOW()
                WHERE id=%s
                """,
                (work_date, status, start, end, memo or "", int(adjustment_id)),
            )
            return cur.rowcount > 0

    def delete(self, adjustment_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM adjustments WHERE id=%s", (int(adjustment_id),))
            return cur.rowcount > 0

    def delete_by_batch(self, batch_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM adjustments WHERE batch_id=%s", (batch_id,))
            return int(cur.rowcount)
