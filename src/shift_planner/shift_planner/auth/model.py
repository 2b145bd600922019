from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role, TokenType


@dataclass(frozen=True)
class UserAuth:
    """Login account. `password_hash` stays None until the first password is set."""

    user_id: int
    email: str
    password_hash: Optional[str]
    role: Role
    staff_id: Optional[int] = None
    is_active: bool = True
    login_attempts: int = 0
    locked_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    def to_public_dict(self) -> dict:
        return {
            "id": self.user_id,
            "email": self.email,
            "role": self.role.value,
            "staffId": self.staff_id,
            "hasPassword": self.password_hash is not None,
        }


@dataclass(frozen=True)
class PasswordResetToken:
    token_id: int
    user_id: int
    token: str
    token_type: TokenType
    expires_at: datetime
    is_used: bool
    created_at: datetime
    used_at: Optional[datetime] = None
