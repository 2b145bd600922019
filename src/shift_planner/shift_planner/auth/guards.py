from __future__ import annotations

from functools import wraps

from flask import current_app, g, request

from ..common.responses import error
from ..core.exceptions import AuthenticationError
from .tokens import Principal, decode_access_token


def _authenticate() -> Principal:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("認証が必要です")
    return decode_access_token(token.strip(), secret=current_app.config["JWT_SECRET"])


def auth_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            g.current_user = _authenticate()
        except AuthenticationError as e:
            return error(str(e), 401)
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            g.current_user = _authenticate()
        except AuthenticationError as e:
            return error(str(e), 401)
        if not g.current_user.is_admin:
            return error("この操作を行う権限がありません", 403)
        return view(*args, **kwargs)

    return wrapper


def current_user() -> Principal:
    return g.current_user
