from __future__ import annotations

from flask import Flask, request

from ..auth.guards import auth_required, current_user
from ..common.datetime_utils import parse_iso_date
from ..common.responses import domain_error, ok, server_error
from ..common.validators import require_int
from ..container import Container
from ..core.exceptions import AuthorizationError, DomainError
from .model import ScheduleEntry


def _ensure_can_edit(staff_id: int) -> None:
    user = current_user()
    if not user.is_admin and user.staff_id != int(staff_id):
        raise AuthorizationError("他のスタッフの予定は操作できません")


def register(app: Flask, container: Container) -> None:
    def _body() -> dict:
        return request.get_json(silent=True) or {}

    @app.route("/api/schedules/layered", methods=["GET"], endpoint="schedules_layered")
    @auth_required
    def layered():
        try:
            work_date = parse_iso_date(request.args.get("date"))
            return ok(container.schedule_service.layered(work_date=work_date))
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("スケジュールの取得に失敗しました")

    @app.route("/api/schedules/unified", methods=["GET"], endpoint="schedules_unified")
    @auth_required
    def unified():
        try:
            staff_id = require_int(request.args.get("staffId"), "staffId")
            work_date = parse_iso_date(request.args.get("date"))
            masking = request.args.get("includeMasking", "false").lower() in ("1", "true", "yes")
            return ok(
                container.schedule_service.unified(staff_id=staff_id, work_date=work_date, include_masking=masking)
            )
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("スケジュールの取得に失敗しました")

    @app.route("/api/schedules", methods=["POST"], endpoint="schedules_create")
    @auth_required
    def create_schedule():
        data = _body()
        try:
            staff_id = require_int(data.get("staffId"), "staffId")
            _ensure_can_edit(staff_id)
            adj = container.schedule_service.create_adjustment(
                staff_id=staff_id,
                work_date=parse_iso_date(data.get("date")),
                status=data.get("status"),
                start=data.get("start"),
                end=data.get("end"),
                memo=data.get("memo") or "",
            )
            return ok(ScheduleEntry.from_adjustment(adj).to_dict(), status=201)
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("予定の作成に失敗しました")

    @app.route("/api/schedules/<int:adjustment_id>", methods=["PATCH"], endpoint="schedules_update")
    @auth_required
    def update_schedule(adjustment_id: int):
        data = _body()
        try:
            adj = container.schedule_service.get_adjustment(adjustment_id)
            _ensure_can_edit(adj.staff_id)
            changes = {k: data[k] for k in ("status", "start", "end", "memo") if k in data}
            if "date" in data:
                changes["date"] = parse_iso_date(data.get("date"))
            adj = container.schedule_service.update_adjustment(adjustment_id=adjustment_id, changes=changes)
            return ok(ScheduleEntry.from_adjustment(adj).to_dict())
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("予定の更新に失敗しました")

    @app.route("/api/schedules/<int:adjustment_id>", methods=["DELETE"], endpoint="schedules_delete")
    @auth_required
    def delete_schedule(adjustment_id: int):
        try:
            adj = container.schedule_service.get_adjustment(adjustment_id)
            _ensure_can_edit(adj.staff_id)
            container.schedule_service.delete_adjustment(adjustment_id)
            return ok(message="予定を削除しました")
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("予定の削除に失敗しました")

    @app.route("/api/schedules/presets/apply", methods=["POST"], endpoint="schedules_apply_preset")
    @auth_required
    def apply_preset():
        data = _body()
        try:
            staff_id = require_int(data.get("staffId"), "staffId")
            _ensure_can_edit(staff_id)
            result = container.preset_service.apply_to_day(
                staff_id=staff_id,
                work_date=parse_iso_date(data.get("date")),
                preset_id=data.get("presetId"),
                segments=data.get("schedules"),
            )
            return ok(result, status=201 if result["created"] else 200)
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("プリセットの適用に失敗しました")
