from __future__ import annotations

from flask import Flask

from ..auth.guards import auth_required
from ..common.responses import domain_error, ok, server_error
from ..container import Container
from ..core.exceptions import DomainError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/staff", methods=["GET"], endpoint="list_staff")
    @auth_required
    def list_staff():
        try:
            return ok([s.to_dict() for s in container.staff_service.list_active()])
        except Exception:
            return server_error("スタッフ一覧の取得に失敗しました")

    @app.route("/api/staff/<int:staff_id>", methods=["GET"], endpoint="staff_detail")
    @auth_required
    def staff_detail(staff_id: int):
        try:
            return ok(container.staff_service.detail(staff_id))
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("スタッフ情報の取得に失敗しました")
