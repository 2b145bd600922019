from __future__ import annotations

from typing import Optional

from flask import Flask, request

from ..auth.guards import admin_required, auth_required, current_user
from ..common.datetime_utils import parse_iso_date
from ..common.responses import domain_error, error, ok, server_error
from ..common.validators import require_int
from ..container import Container
from ..core.enums import PendingState, PendingType
from ..core.exceptions import DomainError, ValidationError


def _enum_arg(enum_cls, value: Optional[str], field_name: str):
    if not value:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"{field_name}が不正です")


def register(app: Flask, container: Container) -> None:
    def _body() -> dict:
        return request.get_json(silent=True) or {}

    @app.route("/api/schedules/pending", methods=["GET"], endpoint="pending_list")
    @auth_required
    def list_pending():
        args = request.args
        try:
            user = current_user()
            staff_id = require_int(args["staffId"], "staffId") if args.get("staffId") else None
            if not user.is_admin:
                staff_id = user.staff_id
            rows = container.pending_service.search(
                staff_id=staff_id,
                department=args.get("department") or None,
                date_from=parse_iso_date(args["dateFrom"]) if args.get("dateFrom") else None,
                date_to=parse_iso_date(args["dateTo"]) if args.get("dateTo") else None,
                pending_type=_enum_arg(PendingType, args.get("pendingType"), "pendingType"),
                state=_enum_arg(PendingState, args.get("state"), "state"),
            )
            return ok(rows)
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("承認待ち予定の取得に失敗しました")

    @app.route("/api/schedules/pending", methods=["POST"], endpoint="pending_create")
    @auth_required
    def create_pending():
        data = _body()
        try:
            user = current_user()
            if data.get("presetId"):
                preset = container.preset_service.get_preset(str(data["presetId"]))
                segments = [s.to_dict() for s in preset.segments]
            elif isinstance(data.get("schedules"), list):
                segments = data["schedules"]
            else:
                segments = [data]

            created = container.pending_service.submit(
                current_role=user.role,
                current_staff_id=user.staff_id,
                actor_id=user.user_id,
                staff_id=require_int(data.get("staffId"), "staffId"),
                work_date=parse_iso_date(data.get("date")),
                segments=segments,
                pending_type=_enum_arg(PendingType, data.get("pendingType"), "pendingType")
                or PendingType.MONTHLY_PLANNER,
            )
            return ok([p.to_dict() for p in created], status=201)
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("予定の登録に失敗しました")

    @app.route("/api/schedules/pending/monthly", methods=["GET"], endpoint="pending_monthly")
    @auth_required
    def monthly():
        try:
            year = require_int(request.args.get("year"), "year")
            month = require_int(request.args.get("month"), "month")
            return ok(container.pending_service.list_for_month(year=year, month=month))
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("月次予定の取得に失敗しました")

    @app.route("/api/schedules/pending/<int:pending_id>", methods=["PATCH"], endpoint="pending_update")
    @auth_required
    def update_pending(pending_id: int):
        data = _body()
        try:
            user = current_user()
            changes = {k: data[k] for k in ("status", "start", "end", "memo") if k in data}
            if "date" in data:
                changes["date"] = parse_iso_date(data.get("date"))
            p = container.pending_service.update(
                current_role=user.role,
                current_staff_id=user.staff_id,
                pending_id=pending_id,
                changes=changes,
            )
            return ok(p.to_dict())
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("予定の更新に失敗しました")

    @app.route("/api/schedules/pending/<int:pending_id>", methods=["DELETE"], endpoint="pending_delete")
    @auth_required
    def delete_pending(pending_id: int):
        try:
            user = current_user()
            container.pending_service.delete(
                current_role=user.role,
                current_staff_id=user.staff_id,
                actor_id=user.user_id,
                pending_id=pending_id,
            )
            return ok(message="予定を削除しました")
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("予定の削除に失敗しました")

    @app.route("/api/schedules/pending/<int:pending_id>/history", methods=["GET"], endpoint="pending_history")
    @auth_required
    def pending_history(pending_id: int):
        try:
            user = current_user()
            logs = container.pending_service.history(
                pending_id, current_role=user.role, current_staff_id=user.staff_id
            )
            return ok([log.to_dict() for log in logs])
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("承認履歴の取得に失敗しました")

    @app.route("/api/schedules/pending/<int:pending_id>/approve", methods=["POST"], endpoint="pending_approve")
    @admin_required
    def approve(pending_id: int):
        try:
            p = container.pending_service.approve(
                actor_id=current_user().user_id, pending_id=pending_id, reason=_body().get("reason")
            )
            return ok(p.to_dict(), message="承認しました")
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("承認処理に失敗しました")

    @app.route("/api/schedules/pending/<int:pending_id>/reject", methods=["POST"], endpoint="pending_reject")
    @admin_required
    def reject(pending_id: int):
        try:
            p = container.pending_service.reject(
                actor_id=current_user().user_id, pending_id=pending_id, reason=_body().get("reason")
            )
            return ok(p.to_dict(), message="却下しました")
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("却下処理に失敗しました")

    @app.route("/api/schedules/pending/<int:pending_id>/unapprove", methods=["POST"], endpoint="pending_unapprove")
    @admin_required
    def unapprove(pending_id: int):
        try:
            p = container.pending_service.unapprove(
                actor_id=current_user().user_id, pending_id=pending_id, reason=_body().get("reason")
            )
            return ok(p.to_dict(), message="承認を取り消しました")
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("承認取消処理に失敗しました")

    @app.route("/api/schedules/pending/bulk", methods=["POST"], endpoint="pending_bulk")
    @admin_required
    def bulk():
        data = _body()
        ids = data.get("pendingIds")
        if not isinstance(ids, list) or not ids:
            return error("pendingIdsを指定してください", 400)
        try:
            result = container.pending_service.bulk_decide(
                actor_id=current_user().user_id,
                pending_ids=ids,
                action=str(data.get("action") or ""),
                reason=data.get("reason"),
            )
            return ok(result)
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("一括処理に失敗しました")
