from __future__ import annotations

from flask import Flask, request

from ..auth.guards import auth_required
from ..common.responses import domain_error, ok, server_error
from ..container import Container
from ..core.exceptions import DomainError
from .catalog import PRESET_CATEGORIES


def register(app: Flask, container: Container) -> None:
    @app.route("/api/presets", methods=["GET"], endpoint="presets_list")
    @auth_required
    def list_presets():
        try:
            return ok(
                {
                    "categories": PRESET_CATEGORIES,
                    "presets": [p.to_dict() for p in container.preset_service.list_catalog()],
                }
            )
        except Exception:
            return server_error("プリセットの取得に失敗しました")

    @app.route("/api/presets/temporary", methods=["GET"], endpoint="presets_temporary_list")
    @auth_required
    def list_temporary():
        try:
            return ok([p.to_dict() for p in container.preset_service.list_temporary()])
        except Exception:
            return server_error("一時プリセットの取得に失敗しました")

    @app.route("/api/presets/temporary", methods=["POST"], endpoint="presets_temporary_create")
    @auth_required
    def save_temporary():
        data = request.get_json(silent=True) or {}
        try:
            preset = container.preset_service.save_temporary(
                display_name=data.get("displayName"),
                segments=data.get("schedules") or [],
                representative_index=int(data.get("representativeScheduleIndex") or 0),
                category=data.get("category") or "special",
            )
            return ok(preset.to_dict(), status=201)
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("一時プリセットの保存に失敗しました")

    @app.route("/api/presets/temporary/<key>", methods=["DELETE"], endpoint="presets_temporary_delete")
    @auth_required
    def delete_temporary(key: str):
        try:
            container.preset_service.delete_temporary(key)
            return ok(message="プリセットを削除しました")
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("一時プリセットの削除に失敗しました")
