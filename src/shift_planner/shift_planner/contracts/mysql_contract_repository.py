from __future__ import annotations

from typing import Iterable, Mapping, Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import WEEKDAY_FIELDS, Contract
from .repository import ContractRepository

_DAY_COLUMNS = ", ".join(WEEKDAY_FIELDS)
_DAY_UPDATES = ", ".join(f"{f}=VALUES({f})" for f in WEEKDAY_FIELDS)
_COLUMNS = "id, staff_id, emp_no, name, department, team, " + _DAY_COLUMNS


def _row_to_contract(r: dict) -> Contract:
    return Contract(
        contract_id=int(r["id"]),
        staff_id=int(r["staff_id"]),
        emp_no=r.get("emp_no"),
        name=r["name"],
        department=r["department"],
        team=r["team"],
        **{f: r.get(f) for f in WEEKDAY_FIELDS},
    )


class MySQLContractRepository(ContractRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_staff(self, staff_id: int) -> Optional[Contract]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM contracts WHERE staff_id=%s", (int(staff_id),))
            r = fetchone(cur)
            return _row_to_contract(r) if r else None

    def list_for_staff_ids(self, staff_ids: Iterable[int]) -> Mapping[int, Contract]:
        ids = [int(i) for i in staff_ids]
        if not ids:
            return {}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM contracts WHERE staff_id IN ({in_clause(ids)})", tuple(ids))
            return {int(r["staff_id"]): _row_to_contract(r) for r in fetchall(cur)}

    def upsert(
        self,
        *,
        staff_id: int,
        emp_no: Optional[str],
        name: str,
        department: str,
        team: str,
        hours: Mapping[str, Optional[str]],
    ) -> int:
        day_values = tuple(hours.get(f) for f in WEEKDAY_FIELDS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO contracts(staff_id, emp_no, name, department, team, {_DAY_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    id=LAST_INSERT_ID(id), emp_no=VALUES(emp_no), name=VALUES(name), department=VALUES(department), team=VALUES(team),
                    {_DAY_UPDATES}
                """,
                (int(staff_id), emp_no, name, department, team) + day_values,
            )
            return int(cur.lastrowid)
