from __future__ import annotations

import json

from flask import Flask, request

from ..auth.guards import admin_required, current_user
from ..common.responses import domain_error, error, ok, server_error
from ..container import Container
from ..core.exceptions import DomainError, ValidationError


def _uploaded_text(field_name: str = "file"):
    upload = request.files.get(field_name)
    if upload is None:
        return None
    try:
        return upload.read().decode("utf-8-sig")
    except UnicodeDecodeError:
        raise ValidationError("ファイルの文字コードはUTF-8にしてください")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/staff/sync-from-json", methods=["POST"], endpoint="staff_sync_from_file")
    @admin_required
    def sync_from_file():
        try:
            text = _uploaded_text()
            if text is None:
                return error("ファイルがアップロードされていません", 400)
            try:
                payload = json.loads(text)
            except json.JSONDecodeError:
                return error("JSONファイルの形式が正しくありません", 400)
            return ok(container.import_service.sync_staff(payload, actor_id=current_user().user_id))
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("スタッフ同期中にエラーが発生しました")

    @app.route("/api/staff/sync-from-json-body", methods=["POST"], endpoint="staff_sync_from_body")
    @admin_required
    def sync_from_body():
        payload = request.get_json(silent=True)
        if payload is None:
            return error("JSONデータが指定されていません", 400)
        try:
            return ok(container.import_service.sync_staff(payload, actor_id=current_user().user_id))
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("スタッフ同期中にエラーが発生しました")

    @app.route("/api/csv-import/schedules", methods=["POST"], endpoint="csv_import_schedules")
    @admin_required
    def import_schedules():
        actor_id = current_user().user_id
        try:
            text = _uploaded_text()
            if text is not None:
                return ok(container.import_service.import_schedules(text, actor_id=actor_id))

            data = request.get_json(silent=True) or {}
            if isinstance(data.get("schedules"), list):
                return ok(container.import_service.import_schedule_rows(data["schedules"], actor_id=actor_id))
            if data.get("csvData"):
                return ok(container.import_service.import_schedules(str(data["csvData"]), actor_id=actor_id))
            return error("CSVデータが指定されていません", 400)
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("CSVインポート中にエラーが発生しました")

    @app.route("/api/csv-import/rollback", methods=["DELETE"], endpoint="csv_import_rollback")
    @admin_required
    def rollback():
        data = request.get_json(silent=True) or {}
        batch_id = data.get("batchId") or request.args.get("batchId", "")
        try:
            return ok(container.import_service.rollback(batch_id, actor_id=current_user().user_id))
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("ロールバック中にエラーが発生しました")

    @app.route("/api/csv-import/history", methods=["GET"], endpoint="csv_import_history")
    @admin_required
    def history():
        try:
            return ok(container.import_service.history())
        except Exception:
            return server_error("インポート履歴の取得に失敗しました")
