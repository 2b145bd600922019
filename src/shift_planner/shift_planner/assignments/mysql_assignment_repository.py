from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import TemporaryAssignment
from .repository import AssignmentRepository

_COLUMNS = (
    "id, staff_id, start_date, end_date, temp_department, temp_team, reason, is_active, "
    "created_by, created_at, updated_at"
)


def _row_to_assignment(r: dict) -> TemporaryAssignment:
    return TemporaryAssignment(
        assignment_id=int(r["id"]),
        staff_id=int(r["staff_id"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        temp_department=r["temp_department"],
        temp_team=r["temp_team"],
        reason=r["reason"],
        is_active=bool(r["is_active"]),
        created_by=r.get("created_by"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLAssignmentRepository(AssignmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, assignment_id: int) -> Optional[TemporaryAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM temporary_assignments WHERE id=%s", (int(assignment_id),))
            r = fetchone(cur)
            return _row_to_assignment(r) if r else None

    def list_for_staff(self, staff_id: int) -> Sequence[TemporaryAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM temporary_assignments
                WHERE staff_id=%s AND is_active=1
                ORDER BY start_date DESC, id DESC
                """,
                (int(staff_id),),
            )
            return [_row_to_assignment(r) for r in fetchall(cur)]

    def find_overlapping(
        self,
        *,
        staff_id: int,
        start_date: date,
        end_date: date,
        exclude_id: Optional[int] = None,
    ) -> Sequence[TemporaryAssignment]:
        # Inclusive ranges overlap when each starts on or before the other ends.
        sql = f"""
            SELECT {_COLUMNS}
            FROM temporary_assignments
            WHERE staff_id=%s AND is_active=1 AND start_date<=%s AND end_date>=%s
        """
        params: list[object] = [int(staff_id), end_date, start_date]
        if exclude_id is not None:
            sql += " AND id<>%s"
            params.append(int(exclude_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_assignment(r) for r in fetchall(cur)]

    def list_active_on(self, day: date) -> Sequence[TemporaryAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM temporary_assignments
                WHERE is_active=1 AND start_date<=%s AND end_date>=%s
                ORDER BY staff_id, start_date
                """,
                (day, day),
            )
            return [_row_to_assignment(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        staff_id: int,
        start_date: date,
        end_date: date,
        temp_department: str,
        temp_team: str,
        reason: str,
        created_by: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO temporary_assignments(
                  staff_id, start_date, end_date, temp_department, temp_team, reason, is_active, created_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,1,%s)
                """,
                (int(staff_id), start_date, end_date, temp_department, temp_team, reason, created_by),
            )
            return int(cur.lastrowid)

    def update(
        self,
        *,
        assignment_id: int,
        start_date: date,
        end_date: date,
        temp_department: str,
        temp_team: str,
        reason: str,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE temporary_assignments
                SET start_date=%s, end_date=%s, temp_department=%s, temp_team=%s, reason=%s
                WHERE id=%s AND is_active=1
                """,
                (start_date, end_date, temp_department, temp_team, reason, int(assignment_id)),
            )
            return cur.rowcount > 0

    def deactivate(self, assignment_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE temporary_assignments SET is_active=0 WHERE id=%s AND is_active=1",
                (int(assignment_id),),
            )
            return cur.rowcount > 0
