from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..audit.service import AuditService
from ..common.datetime_utils import now_local
from ..common.validators import require_min_length, require_non_empty
from ..core.constants import INITIAL_SETUP_TTL, MIN_PASSWORD_LENGTH, PASSWORD_RESET_TTL
from ..core.enums import AuditAction, TokenType
from ..core.exceptions import AuthenticationError, ConflictError, NotFoundError, RateLimitError, ValidationError
from .mailer import Mailer
from .model import UserAuth
from .rate_limiter import LoginRateLimiter
from .repository import ResetTokenRepository, UserAuthRepository
from .tokens import issue_access_token, new_credential_token

logger = logging.getLogger(__name__)

MSG_BAD_CREDENTIALS = "メールアドレスまたはパスワードが正しくありません"
MSG_LINK_SENT = "該当するアカウントが存在する場合、メールを送信しました"
MSG_BAD_TOKEN = "リンクが無効か、有効期限が切れています"

_TOKEN_TTL = {
    TokenType.PASSWORD_RESET: PASSWORD_RESET_TTL,
    TokenType.INITIAL_PASSWORD_SETUP: INITIAL_SETUP_TTL,
}
_TOKEN_PATHS = {
    TokenType.PASSWORD_RESET: "reset-password",
    TokenType.INITIAL_PASSWORD_SETUP: "setup-password",
}


def _normalize_email(email: Optional[str]) -> str:
    return require_non_empty(email, "メールアドレス").lower()


def _verify(password_hash: Optional[str], password: str) -> bool:
    if not password_hash:
        return False
    try:
        return check_password_hash(password_hash, password or "")
    except (TypeError, ValueError):
        # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
        return False


def _validate_new_password(password: Optional[str], confirm: Optional[str]) -> str:
    require_min_length(password, "パスワード", MIN_PASSWORD_LENGTH)
    if password != confirm:
        raise ValidationError("パスワードが一致しません")
    return password


class AuthService:
    """Use case: login with lockout and the password issuance flows."""

    def __init__(
        self,
        users: UserAuthRepository,
        reset_tokens: ResetTokenRepository,
        audit: AuditService,
        mailer: Mailer,
        *,
        jwt_secret: str,
        jwt_expires_hours: int = 24,
        frontend_base_url: str = "http://localhost:5173",
        clock: Callable[[], datetime] = now_local,
    ):
        self._users = users
        self._tokens = reset_tokens
        self._audit = audit
        self._mailer = mailer
        self._jwt_secret = jwt_secret
        self._jwt_expires_hours = int(jwt_expires_hours)
        self._frontend_base_url = frontend_base_url.rstrip("/")
        self._clock = clock
        self.rate_limiter = LoginRateLimiter(users, clock=clock)

    @property
    def jwt_secret(self) -> str:
        return self._jwt_secret

    def _session(self, user: UserAuth) -> dict:
        token, expires_in = issue_access_token(user, secret=self._jwt_secret, expires_hours=self._jwt_expires_hours)
        return {"token": token, "expiresIn": expires_in, "user": user.to_public_dict()}

    # -------- login --------
    def login(self, email: Optional[str], password: Optional[str], *, ip_address: Optional[str] = None) -> dict:
        email = _normalize_email(email)
        details = {"email": email, "ip": ip_address}

        user = self._users.get_by_email(email)
        if not user or not user.is_active:
            self._audit.record(
                AuditAction.LOGIN_FAILURE, resource="auth", details=details, success=False, error_message="unknown account"
            )
            raise AuthenticationError(MSG_BAD_CREDENTIALS)

        try:
            user = self.rate_limiter.check(user)
        except RateLimitError as e:
            self._audit.record(
                AuditAction.LOGIN_BLOCKED,
                resource="auth",
                actor_id=user.user_id,
                details=details,
                success=False,
                error_message=str(e),
            )
            raise

        if not _verify(user.password_hash, password or ""):
            remaining = self.rate_limiter.record_failure(user)
            self._audit.record(
                AuditAction.LOGIN_FAILURE,
                resource="auth",
                actor_id=user.user_id,
                details=dict(details, remainingAttempts=remaining),
                success=False,
                error_message="invalid password",
            )
            if remaining == 0:
                unlock_at = self._clock() + self.rate_limiter.lockout_duration
                raise RateLimitError("ログイン試行回数の上限に達したため、アカウントをロックしました", next_attempt_allowed=unlock_at)
            raise AuthenticationError(MSG_BAD_CREDENTIALS, remaining_attempts=remaining)

        self.rate_limiter.record_success(user)
        self._audit.record(AuditAction.LOGIN_SUCCESS, resource="auth", actor_id=user.user_id, details=details)
        logger.info("User %s logged in", user.user_id)
        return self._session(user)

    # -------- passwords --------
    def set_password(self, *, email: Optional[str], password: Optional[str], confirm: Optional[str]) -> None:
        """First-time password for an account created without one."""

        user = self._users.get_by_email(_normalize_email(email))
        if not user or not user.is_active:
            raise NotFoundError("アカウントが見つかりません")
        if user.password_hash:
            raise ConflictError("既にパスワードが設定されています")

        password = _validate_new_password(password, confirm)
        self._users.set_password(user_id=user.user_id, password_hash=generate_password_hash(password))
        self._audit.record(AuditAction.PASSWORD_SET, resource="auth", actor_id=user.user_id)

    def change_password(
        self, *, user_id: int, current_password: Optional[str], new_password: Optional[str], confirm: Optional[str]
    ) -> None:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("アカウントが見つかりません")
        if not _verify(user.password_hash, current_password or ""):
            raise AuthenticationError("現在のパスワードが正しくありません")

        new_password = _validate_new_password(new_password, confirm)
        self._users.set_password(user_id=user.user_id, password_hash=generate_password_hash(new_password))
        self._audit.record(AuditAction.PASSWORD_SET, resource="auth", actor_id=user.user_id, details={"change": True})

    def _issue_link(self, user: UserAuth, token_type: TokenType) -> None:
        now = self._clock()
        self._tokens.invalidate_unused(user_id=user.user_id, token_type=token_type, at=now)

        token = new_credential_token()
        self._tokens.create(
            user_id=user.user_id, token=token, token_type=token_type, expires_at=now + _TOKEN_TTL[token_type]
        )
        url = f"{self._frontend_base_url}/{_TOKEN_PATHS[token_type]}?token={token}"
        self._mailer.send_password_link(email=user.email, url=url, token_type=token_type)
        self._audit.record(
            AuditAction.PASSWORD_RESET_REQUESTED,
            resource="auth",
            actor_id=user.user_id,
            details={"type": token_type.value},
        )

    def request_password_reset(self, email: Optional[str]) -> str:
        user = self._users.get_by_email(_normalize_email(email))
        if user and user.is_active:
            self._issue_link(user, TokenType.PASSWORD_RESET)
        else:
            logger.info("Password reset requested for unknown account")
        return MSG_LINK_SENT

    def request_initial_setup(self, email: Optional[str]) -> str:
        user = self._users.get_by_email(_normalize_email(email))
        if user and user.is_active and not user.password_hash:
            self._issue_link(user, TokenType.INITIAL_PASSWORD_SETUP)
        else:
            logger.info("Initial setup requested for unknown or already configured account")
        return MSG_LINK_SENT

    def setup_password(self, *, token: Optional[str], password: Optional[str], confirm: Optional[str]) -> dict:
        token = require_non_empty(token, "トークン")
        record = self._tokens.get_by_token(token)
        now = self._clock()
        if not record or record.is_used or record.expires_at <= now:
            raise AuthenticationError(MSG_BAD_TOKEN)

        password = _validate_new_password(password, confirm)
        user = self._users.get_by_id(record.user_id)
        if not user or not user.is_active:
            raise AuthenticationError(MSG_BAD_TOKEN)

        if not self._tokens.mark_used(token_id=record.token_id, at=now):
            raise AuthenticationError(MSG_BAD_TOKEN)
        self._users.set_password(user_id=user.user_id, password_hash=generate_password_hash(password))
        self._audit.record(
            AuditAction.PASSWORD_SET, resource="auth", actor_id=user.user_id, details={"type": record.token_type.value}
        )
        return self._session(self._users.get_by_id(user.user_id))

    # -------- admin --------
    def unlock(self, *, email: Optional[str], actor_id: int) -> None:
        user = self._users.get_by_email(_normalize_email(email))
        if not user:
            raise NotFoundError("アカウントが見つかりません")
        self.rate_limiter.unlock(user)
        self._audit.record(AuditAction.ACCOUNT_UNLOCKED, resource="auth", actor_id=actor_id, resource_id=user.user_id)

    def locked_accounts(self) -> list[dict]:
        out = []
        for user in self._users.list_locked():
            unlock_at = self.rate_limiter.unlock_time(user)
            out.append(
                dict(
                    user.to_public_dict(),
                    loginAttempts=user.login_attempts,
                    lockedAt=user.locked_at.isoformat() if user.locked_at else None,
                    unlockAt=unlock_at.isoformat() if unlock_at else None,
                    isLocked=bool(unlock_at and self._clock() < unlock_at),
                )
            )
        return out
