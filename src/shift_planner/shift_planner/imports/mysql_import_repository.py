from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ImportBatch, ImportKind
from .repository import ImportBatchRepository

_COLUMNS = "batch_id, kind, row_count, created_at, created_by, rolled_back_at"


def _row_to_batch(r: dict[str, Any]) -> ImportBatch:
    return ImportBatch(
        batch_id=r["batch_id"],
        kind=ImportKind(r["kind"]),
        row_count=int(r.get("row_count") or 0),
        created_at=r["created_at"],
        created_by=r.get("created_by"),
        rolled_back_at=r.get("rolled_back_at"),
    )


class MySQLImportBatchRepository(ImportBatchRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, batch_id: str, kind: ImportKind, created_by: Optional[int], created_at: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO import_batches(batch_id, kind, row_count, created_at, created_by) VALUES(%s,%s,0,%s,%s)",
                (batch_id, kind.value, created_at, created_by),
            )

    def set_row_count(self, batch_id: str, row_count: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE import_batches SET row_count=%s WHERE batch_id=%s", (int(row_count), batch_id))

    def get(self, batch_id: str) -> Optional[ImportBatch]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM import_batches WHERE batch_id=%s", (batch_id,))
            r = fetchone(cur)
            return _row_to_batch(r) if r else None

    def list_recent(self, *, limit: int = 200) -> Sequence[ImportBatch]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM import_batches ORDER BY created_at DESC LIMIT %s",
                (int(limit),),
            )
            return [_row_to_batch(r) for r in fetchall(cur)]

    def mark_rolled_back(self, batch_id: str, *, at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE import_batches SET rolled_back_at=%s WHERE batch_id=%s AND rolled_back_at IS NULL",
                (at, batch_id),
            )
            return cur.rowcount > 0
