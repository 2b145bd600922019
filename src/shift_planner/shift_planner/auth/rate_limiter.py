"""Per-account login lockout.

State lives on the account row: `login_attempts` and `locked_at`. Five failures
lock the account for fifteen minutes; once the window has passed the counters
are reset and the next attempt is evaluated normally.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..core.constants import LOCKOUT_DURATION, MAX_LOGIN_ATTEMPTS
from ..core.exceptions import RateLimitError
from .model import UserAuth
from .repository import UserAuthRepository

logger = logging.getLogger(__name__)

MSG_LOCKED = "ログイン試行回数の上限に達しました。しばらくしてから再度お試しください"


class LoginRateLimiter:
    def __init__(
        self,
        users: UserAuthRepository,
        *,
        clock: Callable[[], datetime] = now_local,
        max_attempts: int = MAX_LOGIN_ATTEMPTS,
        lockout: timedelta = LOCKOUT_DURATION,
    ):
        self._users = users
        self._clock = clock
        self._max_attempts = max_attempts
        self._lockout = lockout

    @property
    def lockout_duration(self) -> timedelta:
        return self._lockout

    def unlock_time(self, user: UserAuth) -> Optional[datetime]:
        return user.locked_at + self._lockout if user.locked_at else None

    def check(self, user: UserAuth) -> UserAuth:
        """Raise RateLimitError while locked; reset an expired lock and return the fresh state."""

        if user.locked_at is None:
            return user

        unlock_at = self.unlock_time(user)
        if self._clock() < unlock_at:
            raise RateLimitError(MSG_LOCKED, next_attempt_allowed=unlock_at)

        self._users.update_login_state(user_id=user.user_id, login_attempts=0, locked_at=None)
        logger.info("Lockout expired for account %s, counters reset", user.user_id)
        return replace(user, login_attempts=0, locked_at=None)

    def record_failure(self, user: UserAuth) -> int:
        """Count a failed attempt; returns the attempts left (0 means the account is now locked)."""

        attempts = user.login_attempts + 1
        locked_at = self._clock() if attempts >= self._max_attempts else None
        self._users.update_login_state(user_id=user.user_id, login_attempts=attempts, locked_at=locked_at)
        if locked_at:
            logger.warning("Account %s locked after %d failed logins", user.user_id, attempts)
        return max(0, self._max_attempts - attempts)

    def record_success(self, user: UserAuth) -> None:
        self._users.record_login_success(user_id=user.user_id, at=self._clock())

    def unlock(self, user: UserAuth) -> None:
        self._users.update_login_state(user_id=user.user_id, login_attempts=0, locked_at=None)
