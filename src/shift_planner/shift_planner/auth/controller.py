from __future__ import annotations

from flask import Flask, request

from ..common.responses import domain_error, ok, server_error
from ..container import Container
from ..core.exceptions import DomainError
from .guards import admin_required, auth_required, current_user


def register(app: Flask, container: Container) -> None:
    def _body() -> dict:
        return request.get_json(silent=True) or {}

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        data = _body()
        try:
            session = container.auth_service.login(
                data.get("email"),
                data.get("password"),
                ip_address=request.remote_addr,
            )
            return ok(session)
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("ログイン処理中にエラーが発生しました")

    @app.route("/api/auth/set-password", methods=["POST"], endpoint="auth_set_password")
    def set_password():
        data = _body()
        try:
            container.auth_service.set_password(
                email=data.get("email"),
                password=data.get("password"),
                confirm=data.get("confirmPassword"),
            )
            return ok(message="パスワードを設定しました")
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("パスワード設定中にエラーが発生しました")

    @app.route("/api/auth/change-password", methods=["POST"], endpoint="auth_change_password")
    @auth_required
    def change_password():
        data = _body()
        try:
            container.auth_service.change_password(
                user_id=current_user().user_id,
                current_password=data.get("currentPassword"),
                new_password=data.get("newPassword"),
                confirm=data.get("confirmPassword"),
            )
            return ok(message="パスワードを変更しました")
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("パスワード変更中にエラーが発生しました")

    @app.route("/api/auth/request-password-reset", methods=["POST"], endpoint="auth_request_reset")
    def request_password_reset():
        try:
            return ok(message=container.auth_service.request_password_reset(_body().get("email")))
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("パスワードリセット要求の処理中にエラーが発生しました")

    @app.route("/api/auth/request-initial-setup", methods=["POST"], endpoint="auth_request_initial_setup")
    def request_initial_setup():
        try:
            return ok(message=container.auth_service.request_initial_setup(_body().get("email")))
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("初回設定要求の処理中にエラーが発生しました")

    @app.route("/api/auth/setup-password", methods=["POST"], endpoint="auth_setup_password")
    def setup_password():
        data = _body()
        try:
            session = container.auth_service.setup_password(
                token=data.get("token"),
                password=data.get("password"),
                confirm=data.get("confirmPassword"),
            )
            return ok(session, message="パスワードを設定しました")
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("パスワード設定中にエラーが発生しました")

    @app.route("/api/auth/unlock", methods=["POST"], endpoint="auth_unlock")
    @admin_required
    def unlock():
        try:
            container.auth_service.unlock(email=_body().get("email"), actor_id=current_user().user_id)
            return ok(message="アカウントのロックを解除しました")
        except DomainError as e:
            return domain_error(e)
        except Exception:
            return server_error("ロック解除中にエラーが発生しました")

    @app.route("/api/auth/locked-accounts", methods=["GET"], endpoint="auth_locked_accounts")
    @admin_required
    def locked_accounts():
        try:
            return ok(container.auth_service.locked_accounts())
        except Exception:
            return server_error("ロック中アカウントの取得に失敗しました")
