from __future__ import annotations

from flask import Flask, request

from ..auth.guards import auth_required, current_user
from ..common.datetime_utils import parse_iso_date
from ..common.responses import domain_error, error, ok, server_error
from ..common.validators import require_int
from ..container import Container
from ..core.exceptions import DomainError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/responsibilities", methods=["GET"], endpoint="responsibilities_list")
    @auth_required
    def list_responsibilities():
        args = request.args
        try:
            if args.get("date"):
                work_date = parse_iso_date(args["date"])
                return ok(container.responsibility_service.status_for_date(work_date))
            if args.get("year") and args.get("month"):
                rows = container.responsibility_service.list_for_month(
                    require_int(args["year"], "year"), require_int(args["month"], "month")
                )
                return ok([r.to_dict() for r in rows])
            return error("dateまたはyear/monthを指定してください", 400)
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("担当設定の取得に失敗しました")

    @app.route("/api/responsibilities", methods=["POST"], endpoint="responsibilities_save")
    @auth_required
    def save_responsibilities():
        data = request.get_json(silent=True) or {}
        try:
            user = current_user()
            saved = container.responsibility_service.save(
                current_role=user.role,
                current_staff_id=user.staff_id,
                actor_id=user.user_id,
                staff_id=require_int(data.get("staffId"), "staffId"),
                work_date=parse_iso_date(data.get("date")),
                duties=data.get("responsibilities"),
            )
            return ok(saved.to_dict())
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("担当設定の保存に失敗しました")

    @app.route("/api/responsibilities", methods=["DELETE"], endpoint="responsibilities_clear")
    @auth_required
    def clear_responsibilities():
        args = request.args
        try:
            user = current_user()
            cleared = container.responsibility_service.clear(
                current_role=user.role,
                current_staff_id=user.staff_id,
                actor_id=user.user_id,
                staff_id=require_int(args.get("staffId"), "staffId"),
                work_date=parse_iso_date(args.get("date")),
            )
            return ok(cleared.to_dict())
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("担当設定のクリアに失敗しました")
