from __future__ import annotations

import logging
from typing import Protocol

from ..core.enums import TokenType

logger = logging.getLogger(__name__)

SUBJECTS = {
    TokenType.INITIAL_PASSWORD_SETUP: "【シフト管理】初回パスワード設定のご案内",
    TokenType.PASSWORD_RESET: "【シフト管理】パスワード再設定のご案内",
}


class Mailer(Protocol):
    def send_password_link(self, *, email: str, url: str, token_type: TokenType) -> None:
        raise NotImplementedError


class LoggingMailer(Mailer):
    """Mail delivery stand-in: logs who was sent which notice.

    The link carries a live credential token, so it is written (at DEBUG) only when
    `expose_links` is set, which the development settings do.
    """

    def __init__(self, *, expose_links: bool = False):
        self._expose_links = expose_links

    def send_password_link(self, *, email: str, url: str, token_type: TokenType) -> None:
        logger.info("[mail] to=%s subject=%s", email, SUBJECTS[token_type])
        if self._expose_links:
            logger.debug("[mail] link for %s: %s", email, url)
