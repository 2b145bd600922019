from __future__ import annotations

from flask import Flask, request

from ..auth.guards import admin_required
from ..common.responses import ok, server_error
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT


def register(app: Flask, container: Container) -> None:
    @app.route("/api/audit-logs", methods=["GET"], endpoint="list_audit_logs")
    @admin_required
    def list_audit_logs():
        limit = request.args.get("limit", type=int) or DEFAULT_HISTORY_LIMIT
        action = request.args.get("action") or None
        try:
            logs = container.audit_service.list_recent(limit=min(limit, 1000), action=action)
            return ok([log.to_dict() for log in logs])
        except Exception:
            return server_error("監査ログの取得に失敗しました")
