from __future__ import annotations

from flask import Flask, request

from ..auth.guards import auth_required
from ..common.datetime_utils import now_local
from ..common.responses import error, ok, server_error
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/holidays", methods=["GET"], endpoint="list_holidays")
    @auth_required
    def list_holidays():
        try:
            year = int(request.args.get("year") or now_local().year)
        except ValueError:
            return error("年の指定が不正です", 400)
        try:
            return ok([h.to_dict() for h in container.holiday_service.list_for_year(year)])
        except Exception:
            return server_error("祝日一覧の取得に失敗しました")
