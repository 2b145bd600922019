from __future__ import annotations

import json
from datetime import datetime, timedelta
from typing import Any, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .store import KeyValueStore, StoredValue


def _row_to_value(r: dict) -> StoredValue:
    return StoredValue(key=r["preset_key"], value=json.loads(r["payload"]), created_at=r["created_at"])


class MySQLKeyValueStore(KeyValueStore):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, key: str) -> Optional[StoredValue]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT preset_key, payload, created_at FROM temporary_presets WHERE preset_key=%s", (key,))
            r = fetchone(cur)
            return _row_to_value(r) if r else None

    def set(self, key: str, value: dict[str, Any], *, created_at: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO temporary_presets(preset_key, payload, created_at)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE payload=VALUES(payload), created_at=VALUES(created_at)
                """,
                (key, json.dumps(value, ensure_ascii=False), created_at),
            )

    def delete(self, key: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM temporary_presets WHERE preset_key=%s", (key,))
            return cur.rowcount > 0

    def list_expired(self, *, now: datetime, ttl: timedelta) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT preset_key FROM temporary_presets WHERE created_at <= %s", (now - ttl,))
            return [r["preset_key"] for r in fetchall(cur)]

    def items(self) -> Sequence[StoredValue]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT preset_key, payload, created_at FROM temporary_presets ORDER BY created_at")
            return [_row_to_value(r) for r in fetchall(cur)]
