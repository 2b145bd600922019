from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """ユーザー種別（権限判定に使用）。"""

    ADMIN = "ADMIN"
    STAFF = "STAFF"


class Layer(str, Enum):
    """スケジュールのレイヤー。契約は読み取り専用、調整はユーザー編集可能。"""

    CONTRACT = "contract"
    ADJUSTMENT = "adjustment"

    @property
    def priority(self) -> int:
        return 1 if self is Layer.CONTRACT else 2


class PendingState(str, Enum):
    """Monthly-plan approval state, derived from approved_at / rejected_at."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PendingType(str, Enum):
    MONTHLY_PLANNER = "monthly-planner"
    MANUAL = "manual"


class ApprovalAction(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    UNAPPROVED = "unapproved"


class TokenType(str, Enum):
    INITIAL_PASSWORD_SETUP = "INITIAL_PASSWORD_SETUP"
    PASSWORD_RESET = "PASSWORD_RESET"


class AuditAction(str, Enum):
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGIN_FAILURE = "LOGIN_FAILURE"
    LOGIN_BLOCKED = "LOGIN_BLOCKED"
    PASSWORD_SET = "PASSWORD_SET"
    PASSWORD_RESET_REQUESTED = "PASSWORD_RESET_REQUESTED"
    ACCOUNT_UNLOCKED = "ACCOUNT_UNLOCKED"
    IMPORT = "IMPORT"
    IMPORT_ROLLBACK = "IMPORT_ROLLBACK"
    PENDING_APPROVE = "PENDING_APPROVE"
    PENDING_REJECT = "PENDING_REJECT"
    PENDING_UNAPPROVE = "PENDING_UNAPPROVE"
    ASSIGNMENT_CREATE = "ASSIGNMENT_CREATE"
    ASSIGNMENT_UPDATE = "ASSIGNMENT_UPDATE"
    ASSIGNMENT_END = "ASSIGNMENT_END"
