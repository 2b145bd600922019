from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import Role, TokenType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import PasswordResetToken, UserAuth
from .repository import ResetTokenRepository, UserAuthRepository

_USER_COLUMNS = "id, email, password_hash, user_type, staff_id, is_active, login_attempts, locked_at, last_login_at"


def _row_to_user(r: dict) -> UserAuth:
    return UserAuth(
        user_id=int(r["id"]),
        email=r["email"],
        password_hash=r.get("password_hash"),
        role=Role(r["user_type"]),
        staff_id=r.get("staff_id"),
        is_active=bool(r["is_active"]),
        login_attempts=int(r.get("login_attempts") or 0),
        locked_at=r.get("locked_at"),
        last_login_at=r.get("last_login_at"),
    )


class MySQLUserAuthRepository(UserAuthRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[UserAuth]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM user_auth WHERE id=%s", (int(user_id),))
            r = fetchone(cur)
            return _row_to_user(r) if r else None

    def get_by_email(self, email: str) -> Optional[UserAuth]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM user_auth WHERE email=%s", (email,))
            r = fetchone(cur)
            return _row_to_user(r) if r else None

    def update_login_state(self, *, user_id: int, login_attempts: int, locked_at: Optional[datetime]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE user_auth SET login_attempts=%s, locked_at=%s WHERE id=%s",
                (int(login_attempts), locked_at, int(user_id)),
            )
            return cur.rowcount > 0

    def record_login_success(self, *, user_id: int, at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE user_auth SET login_attempts=0, locked_at=NULL, last_login_at=%s WHERE id=%s",
                (at, int(user_id)),
            )
            return cur.rowcount > 0

    def set_password(self, *, user_id: int, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE user_auth
                SET password_hash=%s, login_attempts=0, locked_at=NULL
                WHERE id=%s
                """,
                (password_hash, int(user_id)),
            )
            return cur.rowcount > 0

    def list_locked(self) -> Sequence[UserAuth]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM user_auth WHERE locked_at IS NOT NULL ORDER BY locked_at DESC")
            return [_row_to_user(r) for r in fetchall(cur)]


class MySQLResetTokenRepository(ResetTokenRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, user_id: int, token: str, token_type: TokenType, expires_at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO password_reset_tokens(user_auth_id, token, token_type, expires_at, is_used)
                VALUES(%s,%s,%s,%s,0)
                """,
                (int(user_id), token, token_type.value, expires_at),
            )
            return int(cur.lastrowid)

    def get_by_token(self, token: str) -> Optional[PasswordResetToken]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, user_auth_id, token, token_type, expires_at, is_used, used_at, created_at
                FROM password_reset_tokens
                WHERE token=%s
                """,
                (token,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return PasswordResetToken(
                token_id=int(r["id"]),
                user_id=int(r["user_auth_id"]),
                token=r["token"],
                token_type=TokenType(r["token_type"]),
                expires_at=r["expires_at"],
                is_used=bool(r["is_used"]),
                used_at=r.get("used_at"),
                created_at=r["created_at"],
            )

    def invalidate_unused(self, *, user_id: int, token_type: TokenType, at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE password_reset_tokens
                SET is_used=1, used_at=%s
                WHERE user_auth_id=%s AND token_type=%s AND is_used=0
                """,
                (at, int(user_id), token_type.value),
            )
            return int(cur.rowcount)

    def mark_used(self, *, token_id: int, at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE password_reset_tokens SET is_used=1, used_at=%s WHERE id=%s AND is_used=0",
                (at, int(token_id)),
            )
            return cur.rowcount > 0
