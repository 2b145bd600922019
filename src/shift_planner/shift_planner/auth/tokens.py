from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from ..core.constants import TOKEN_BYTES
from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from .model import UserAuth

JWT_ALGORITHM = "HS256"


@dataclass(frozen=True)
class Principal:
    """Caller identity decoded from a bearer token."""

    user_id: int
    email: str
    role: Role
    staff_id: Optional[int]

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def issue_access_token(user: UserAuth, *, secret: str, expires_hours: int) -> tuple[str, int]:
    now = datetime.now(timezone.utc)
    expires_in = int(expires_hours) * 3600
    payload = {
        "sub": str(user.user_id),
        "email": user.email,
        "role": user.role.value,
        "staffId": user.staff_id,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=expires_in)).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM), expires_in


def decode_access_token(token: str, *, secret: str) -> Principal:
    try:
        payload = jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as exc:
        raise AuthenticationError("トークンの有効期限が切れています") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthenticationError("トークンが無効です") from exc

    try:
        staff_id = payload.get("staffId")
        return Principal(
            user_id=int(payload["sub"]),
            email=str(payload["email"]),
            role=Role(payload["role"]),
            staff_id=int(staff_id) if staff_id is not None else None,
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise AuthenticationError("トークンが無効です") from exc


def new_credential_token() -> str:
    """32 random bytes as hex, used for password setup / reset links."""

    return secrets.token_hex(TOKEN_BYTES)
