from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import TokenType
from .model import PasswordResetToken, UserAuth


class UserAuthRepository(Protocol):
    def get_by_id(self, user_id: int) -> Optional[UserAuth]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[UserAuth]:
        raise NotImplementedError

    def update_login_state(self, *, user_id: int, login_attempts: int, locked_at: Optional[datetime]) -> bool:
        raise NotImplementedError

    def record_login_success(self, *, user_id: int, at: datetime) -> bool:
        """Reset attempts, clear the lock and stamp last_login_at."""

        raise NotImplementedError

    def set_password(self, *, user_id: int, password_hash: str) -> bool:
        """Store the hash and clear any lockout."""

        raise NotImplementedError

    def list_locked(self) -> Sequence[UserAuth]:
        raise NotImplementedError


class ResetTokenRepository(Protocol):
    def create(self, *, user_id: int, token: str, token_type: TokenType, expires_at: datetime) -> int:
        raise NotImplementedError

    def get_by_token(self, token: str) -> Optional[PasswordResetToken]:
        raise NotImplementedError

    def invalidate_unused(self, *, user_id: int, token_type: TokenType, at: datetime) -> int:
        raise NotImplementedError

    def mark_used(self, *, token_id: int, at: datetime) -> bool:
        raise NotImplementedError
