from __future__ import annotations

import json
from datetime import date
from typing import Any, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import StaffResponsibility
from .repository import ResponsibilityRepository

_COLUMNS = "staff_id, work_date, duties, updated_by, updated_at"


def _row_to_responsibility(r: dict) -> StaffResponsibility:
    return StaffResponsibility(
        staff_id=int(r["staff_id"]),
        work_date=r["work_date"],
        duties=json.loads(r["duties"]) if r.get("duties") else {},
        updated_by=r.get("updated_by"),
        updated_at=r.get("updated_at"),
    )


class MySQLResponsibilityRepository(ResponsibilityRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, staff_id: int, work_date: date) -> Optional[StaffResponsibility]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM staff_responsibilities WHERE staff_id=%s AND work_date=%s",
                (int(staff_id), work_date),
            )
            r = fetchone(cur)
            return _row_to_responsibility(r) if r else None

    def list_between(self, *, start: date, end: date) -> Sequence[StaffResponsibility]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM staff_responsibilities
                WHERE work_date BETWEEN %s AND %s
                ORDER BY work_date, staff_id
                """,
                (start, end),
            )
            return [_row_to_responsibility(r) for r in fetchall(cur)]

    def upsert(self, *, staff_id: int, work_date: date, duties: dict[str, Any], updated_by: Optional[int]) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO staff_responsibilities(staff_id, work_date, duties, updated_by)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE duties=VALUES(duties), updated_by=VALUES(updated_by)
                """,
                (int(staff_id), work_date, json.dumps(duties, ensure_ascii=False), updated_by),
            )
