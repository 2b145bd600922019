from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Staff
from .repository import StaffRepository

_COLUMNS = "id, emp_no, name, department, team, is_active, batch_id"


def _row_to_staff(r: dict) -> Staff:
    return Staff(
        staff_id=int(r["id"]),
        emp_no=r.get("emp_no"),
        name=r["name"],
        department=r["department"],
        team=r["team"],
        is_active=bool(r["is_active"]),
        batch_id=r.get("batch_id"),
    )


class MySQLStaffRepository(StaffRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, staff_id: int) -> Optional[Staff]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM staff WHERE id=%s", (int(staff_id),))
            r = fetchone(cur)
            return _row_to_staff(r) if r else None

    def get_by_emp_no(self, emp_no: str) -> Optional[Staff]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM staff WHERE emp_no=%s", (str(emp_no),))
            r = fetchone(cur)
            return _row_to_staff(r) if r else None

    def list_active(self) -> Sequence[Staff]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM staff
                WHERE is_active=1
                ORDER BY emp_no IS NULL, emp_no, id
                """
            )
            return [_row_to_staff(r) for r in fetchall(cur)]

    def list_all(self) -> Sequence[Staff]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM staff ORDER BY emp_no IS NULL, emp_no, id")
            return [_row_to_staff(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        emp_no: Optional[str],
        name: str,
        department: str,
        team: str,
        batch_id: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO staff(emp_no, name, department, team, is_active, batch_id)
                VALUES(%s,%s,%s,%s,1,%s)
                """,
                (emp_no, name, department, team, batch_id),
            )
            return int(cur.lastrowid)

    def update(self, *, staff_id: int, name: str, department: str, team: str, is_active: bool = True) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE staff
                SET name=%s, department=%s, team=%s, is_active=%s
                WHERE id=%s
                """,
                (name, department, team, 1 if is_active else 0, int(staff_id)),
            )
            return cur.rowcount > 0

    def deactivate_missing(self, *, keep_emp_nos: Iterable[str]) -> int:
        keep = [str(e) for e in keep_emp_nos]
        with db_cursor(self._conn_factory) as (_, cur):
            if keep:
                cur.execute(
                    f"""
                    UPDATE staff SET is_active=0
                    WHERE is_active=1 AND emp_no IS NOT NULL AND emp_no NOT IN ({in_clause(keep)})
                    """,
                    tuple(keep),
                )
            else:
                cur.execute("UPDATE staff SET is_active=0 WHERE is_active=1 AND emp_no IS NOT NULL")
            return int(cur.rowcount)

    def set_active(self, staff_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE staff SET is_active=%s WHERE id=%s", (1 if is_active else 0, int(staff_id)))
            return cur.rowcount > 0

    def list_by_batch(self, batch_id: str) -> Sequence[Staff]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM staff WHERE batch_id=%s", (batch_id,))
            return [_row_to_staff(r) for r in fetchall(cur)]

    def is_referenced(self, staff_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT
                  (SELECT COUNT(*) FROM adjustments WHERE staff_id=%s)
                + (SELECT COUNT(*) FROM pending_schedules WHERE staff_id=%s)
                + (SELECT COUNT(*) FROM user_auth WHERE staff_id=%s)
                + (SELECT COUNT(*) FROM temporary_assignments WHERE staff_id=%s)
                + (SELECT COUNT(*) FROM staff_responsibilities WHERE staff_id=%s) AS refs
                """,
                (int(staff_id),) * 5,
            )
            r = fetchone(cur)
            return bool(r and int(r["refs"]) > 0)

    def delete(self, staff_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM contracts WHERE staff_id=%s", (int(staff_id),))
            cur.execute("DELETE FROM staff WHERE id=%s", (int(staff_id),))
            return cur.rowcount > 0
