from __future__ import annotations

from datetime import timedelta

import pytest

from src.shift_planner.shift_planner.auth.service import MSG_BAD_CREDENTIALS, MSG_LINK_SENT
from src.shift_planner.shift_planner.auth.tokens import decode_access_token
from src.shift_planner.shift_planner.core.enums import Role, TokenType
from src.shift_planner.shift_planner.core.exceptions import (
    AuthenticationError,
    ConflictError,
    RateLimitError,
    ValidationError,
)

from conftest import ADMIN_PASSWORD, JWT_SECRET, STAFF_PASSWORD


def _token_from_last_mail(container) -> str:
    url = container.mailer.sent[-1]["url"]
    return url.split("token=", 1)[1]


def test_login_issues_decodable_token(container, roster):
    session = container.auth_service.login("ADMIN@example.com", ADMIN_PASSWORD)

    principal = decode_access_token(session["token"], secret=JWT_SECRET)
    assert principal.role is Role.ADMIN and principal.is_admin
    assert session["user"]["email"] == "admin@example.com"
    assert "LOGIN_SUCCESS" in container.audit_repo.actions()



def test_failed_and_blocked_logins_are_audited(container, roster):
    for _ in range(5):
        with pytest.raises(AuthenticationError):
            container.auth_service.login("sato@example.com", "wrong-password", ip_address="10.0.0.5")
    with pytest.raises(RateLimitError):
        container.auth_service.login("sato@example.com", STAFF_PASSWORD)

    logs = container.audit_repo.logs
    failures = [log for log in logs if log.action == "LOGIN_FAILURE"]
    [blocked] = [log for log in logs if log.action == "LOGIN_BLOCKED"]
    assert len(failures) == 5
    assert all(not log.success and log.error_message == "invalid password" for log in failures)
    assert [log.details["remainingAttempts"] for log in failures] == [4, 3, 2, 1, 0]
    assert failures[0].details["ip"] == "10.0.0.5"
    assert blocked.success is False and blocked.error_message
    assert blocked.actor_id == roster["user"].user_id
    assert "LOGIN_SUCCESS" not in container.audit_repo.actions()


def test_unknown_account_failure_is_audited(container, roster):
    with pytest.raises(AuthenticationError):
        container.auth_service.login("nobody@example.com", "whatever")

    [log] = container.audit_repo.logs
    assert (log.action, log.success, log.error_message) == ("LOGIN_FAILURE", False, "unknown account")
    assert log.actor_id is None

def test_unknown_account_gets_generic_message(container, roster):
    with pytest.raises(AuthenticationError) as exc:
        container.auth_service.login("nobody@example.com", "whatever")

    assert str(exc.value) == MSG_BAD_CREDENTIALS
    assert exc.value.remaining_attempts is None


def test_token_signed_with_another_secret_is_rejected(container, roster):
    session = container.auth_service.login("admin@example.com", ADMIN_PASSWORD)

    with pytest.raises(AuthenticationError):
        decode_access_token(session["token"], secret="other-secret")


def test_reset_request_is_indistinguishable_for_unknown_email(container, roster):
    assert container.auth_service.request_password_reset("nobody@example.com") == MSG_LINK_SENT
    assert container.mailer.sent == []

    assert container.auth_service.request_password_reset("sato@example.com") == MSG_LINK_SENT
    assert len(container.mailer.sent) == 1
    assert "/reset-password?token=" in container.mailer.sent[0]["url"]


def test_reset_token_is_single_use(container, roster):
    container.auth_service.request_password_reset("sato@example.com")
    token = _token_from_last_mail(container)

    session = container.auth_service.setup_password(token=token, password="new-pass-456", confirm="new-pass-456")
    assert session["user"]["email"] == "sato@example.com"
    assert container.auth_service.login("sato@example.com", "new-pass-456")["token"]

    with pytest.raises(AuthenticationError):
        container.auth_service.setup_password(token=token, password="again-pass-1", confirm="again-pass-1")


def test_newer_reset_request_invalidates_older_link(container, roster):
    container.auth_service.request_password_reset("sato@example.com")
    old_token = _token_from_last_mail(container)
    container.auth_service.request_password_reset("sato@example.com")

    with pytest.raises(AuthenticationError):
        container.auth_service.setup_password(token=old_token, password="new-pass-456", confirm="new-pass-456")


def test_reset_link_expires_after_one_hour(container, roster, clock):
    container.auth_service.request_password_reset("sato@example.com")
    token = _token_from_last_mail(container)

    clock.advance(timedelta(hours=1))
    with pytest.raises(AuthenticationError):
        container.auth_service.setup_password(token=token, password="new-pass-456", confirm="new-pass-456")


def test_initial_setup_only_for_accounts_without_password(container, roster):
    container.users_repo.add(email="new@example.com")

    container.auth_service.request_initial_setup("sato@example.com")
    assert container.mailer.sent == []

    container.auth_service.request_initial_setup("new@example.com")
    assert container.mailer.sent[-1]["type"] is TokenType.INITIAL_PASSWORD_SETUP
    assert "/setup-password?token=" in container.mailer.sent[-1]["url"]


def test_set_password_validation(container, roster):
    container.users_repo.add(email="new@example.com")

    with pytest.raises(ValidationError):
        container.auth_service.set_password(email="new@example.com", password="short", confirm="short")
    with pytest.raises(ValidationError):
        container.auth_service.set_password(email="new@example.com", password="long-enough-1", confirm="different-1")

    container.auth_service.set_password(email="new@example.com", password="long-enough-1", confirm="long-enough-1")
    with pytest.raises(ConflictError):
        container.auth_service.set_password(email="new@example.com", password="long-enough-2", confirm="long-enough-2")


def test_change_password_checks_current_password(container, roster):
    user = roster["user"]

    with pytest.raises(AuthenticationError):
        container.auth_service.change_password(
            user_id=user.user_id, current_password="wrong", new_password="brand-new-1", confirm="brand-new-1"
        )

    container.auth_service.change_password(
        user_id=user.user_id, current_password="staff-pass-123", new_password="brand-new-1", confirm="brand-new-1"
    )
    assert container.auth_service.login("sato@example.com", "brand-new-1")["token"]
