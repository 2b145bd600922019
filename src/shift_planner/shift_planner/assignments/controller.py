from __future__ import annotations

from flask import Flask, request

from ..auth.guards import admin_required, auth_required, current_user
from ..common.datetime_utils import now_local, parse_iso_date
from ..common.responses import domain_error, ok, server_error
from ..common.validators import require_int
from ..container import Container
from ..core.exceptions import DomainError


def register(app: Flask, container: Container) -> None:
    def _body() -> dict:
        return request.get_json(silent=True) or {}

    def _optional_date(data: dict, key: str):
        return parse_iso_date(data[key]) if data.get(key) else None

    @app.route("/api/assignments/staff/<int:staff_id>", methods=["GET"], endpoint="assignments_for_staff")
    @auth_required
    def list_for_staff(staff_id: int):
        try:
            return ok([a.to_dict() for a in container.assignment_service.list_for_staff(staff_id)])
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("支援設定の取得に失敗しました")

    @app.route("/api/assignments/status", methods=["GET"], endpoint="assignments_status")
    @auth_required
    def support_status():
        try:
            day = parse_iso_date(request.args["date"]) if request.args.get("date") else now_local().date()
            return ok(container.assignment_service.support_status(day))
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("支援状況の取得に失敗しました")

    @app.route("/api/assignments", methods=["POST"], endpoint="assignments_create")
    @admin_required
    def create_assignment():
        data = _body()
        try:
            created = container.assignment_service.create(
                actor_id=current_user().user_id,
                staff_id=require_int(data.get("staffId"), "staffId"),
                start_date=parse_iso_date(data.get("startDate")),
                end_date=parse_iso_date(data.get("endDate")),
                temp_department=data.get("tempDept"),
                temp_team=data.get("tempGroup"),
                reason=data.get("reason"),
            )
            return ok(created.to_dict(), status=201)
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("支援設定の登録に失敗しました")

    @app.route("/api/assignments/<int:assignment_id>", methods=["PUT", "PATCH"], endpoint="assignments_update")
    @admin_required
    def update_assignment(assignment_id: int):
        data = _body()
        try:
            updated = container.assignment_service.update(
                assignment_id,
                actor_id=current_user().user_id,
                start_date=_optional_date(data, "startDate"),
                end_date=_optional_date(data, "endDate"),
                temp_department=data.get("tempDept"),
                temp_team=data.get("tempGroup"),
                reason=data.get("reason"),
            )
            return ok(updated.to_dict())
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("支援設定の更新に失敗しました")

    @app.route("/api/assignments/<int:assignment_id>", methods=["DELETE"], endpoint="assignments_end")
    @admin_required
    def end_assignment(assignment_id: int):
        try:
            container.assignment_service.end(assignment_id, actor_id=current_user().user_id)
            return ok(message="支援設定を終了しました")
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("支援設定の削除に失敗しました")
