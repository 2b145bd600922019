from __future__ import annotations

import json
from typing import Any, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import AuditLog
from .repository import AuditLogRepository


class MySQLAuditLogRepository(AuditLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        actor_id: Optional[int],
        action: str,
        resource: str,
        resource_id: Optional[str],
        details: dict[str, Any],
        success: bool,
        error_message: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO audit_logs(actor_id, action, resource, resource_id, details, success, error_message)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    actor_id,
                    action,
                    resource,
                    resource_id,
                    json.dumps(details, ensure_ascii=False, default=str),
                    1 if success else 0,
                    error_message,
                ),
            )
            return int(cur.lastrowid)

    def list_recent(self, *, limit: int = 200, action: Optional[str] = None) -> Sequence[AuditLog]:
        clauses = ["1=1"]
        params: list[object] = []
        if action:
            clauses.append("action=%s")
            params.append(action)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT id, actor_id, action, resource, resource_id, details, success, error_message, created_at
                FROM audit_logs
                WHERE {where}
                ORDER BY created_at DESC, id DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [
                AuditLog(
                    log_id=int(r["id"]),
                    actor_id=r.get("actor_id"),
                    action=r["action"],
                    resource=r["resource"],
                    resource_id=r.get("resource_id"),
                    details=json.loads(r["details"]) if r.get("details") else {},
                    success=bool(r["success"]),
                    error_message=r.get("error_message"),
                    created_at=r["created_at"],
                )
                for r in fetchall(cur)
            ]
