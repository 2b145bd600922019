"""In-memory repositories and shared fixtures.

The fakes mirror the MySQL repositories closely enough for service and API tests;
they never touch a database.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.shift_planner.shift_planner.assignments.model import TemporaryAssignment
from src.shift_planner.shift_planner.audit.model import AuditLog
from src.shift_planner.shift_planner.auth.model import PasswordResetToken, UserAuth
from src.shift_planner.shift_planner.container import assemble
from src.shift_planner.shift_planner.contracts.model import Contract
from src.shift_planner.shift_planner.core.enums import PendingState, Role
from src.shift_planner.shift_planner.core.exceptions import NotFoundError
from src.shift_planner.shift_planner.holidays.model import Holiday
from src.shift_planner.shift_planner.imports.model import ImportBatch
from src.shift_planner.shift_planner.pending.model import ApprovalLog, PendingSchedule
from src.shift_planner.shift_planner.presets.store import InMemoryKeyValueStore
from src.shift_planner.shift_planner.responsibilities.model import StaffResponsibility
from src.shift_planner.shift_planner.schedules.model import Adjustment
from src.shift_planner.shift_planner.staff.model import Staff

JWT_SECRET = "test-jwt-secret"
ADMIN_PASSWORD = "admin-pass-123"
STAFF_PASSWORD = "staff-pass-123"


class RecordingMailer:
    def __init__(self):
        self.sent: list[dict] = []

    def send_password_link(self, *, email, url, token_type) -> None:
        self.sent.append({"email": email, "url": url, "type": token_type})


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


class FakeStaffRepo:
    def __init__(self, refs=None):
        self._next_id = 1
        self._rows: dict[int, Staff] = {}
        # staff_id -> referenced? (adjustments / pending are checked through `refs`)
        self._refs = refs or (lambda staff_id: False)

    def add(self, *, emp_no, name, department="サポート課", team="Aチーム", is_active=True, batch_id=None) -> Staff:
        sid = self.create(emp_no=emp_no, name=name, department=department, team=team, batch_id=batch_id)
        if not is_active:
            self.set_active(sid, is_active=False)
        return self._rows[sid]

    def get_by_id(self, staff_id):
        return self._rows.get(int(staff_id))

    def get_by_emp_no(self, emp_no):
        return next((s for s in self._rows.values() if s.emp_no == str(emp_no)), None)

    def list_active(self):
        return sorted((s for s in self._rows.values() if s.is_active), key=lambda s: (s.emp_no is None, s.emp_no or ""))

    def list_all(self):
        return list(self._rows.values())

    def create(self, *, emp_no, name, department, team, batch_id=None) -> int:
        sid = self._next_id
        self._next_id += 1
        self._rows[sid] = Staff(
            staff_id=sid, emp_no=emp_no, name=name, department=department, team=team, batch_id=batch_id
        )
        return sid

    def update(self, *, staff_id, name, department, team, is_active=True) -> bool:
        s = self._rows.get(int(staff_id))
        if not s:
            return False
        self._rows[s.staff_id] = replace(s, name=name, department=department, team=team, is_active=is_active)
        return True

    def deactivate_missing(self, *, keep_emp_nos) -> int:
        keep = set(keep_emp_nos)
        count = 0
        for s in list(self._rows.values()):
            if s.is_active and s.emp_no is not None and s.emp_no not in keep:
                self._rows[s.staff_id] = replace(s, is_active=False)
                count += 1
        return count

    def set_active(self, staff_id, *, is_active) -> bool:
        s = self._rows.get(int(staff_id))
        if not s:
            return False
        self._rows[s.staff_id] = replace(s, is_active=is_active)
        return True

    def list_by_batch(self, batch_id):
        return [s for s in self._rows.values() if s.batch_id == batch_id]

    def is_referenced(self, staff_id) -> bool:
        return bool(self._refs(int(staff_id)))

    def delete(self, staff_id) -> bool:
        return self._rows.pop(int(staff_id), None) is not None


class FakeContractRepo:
    def __init__(self):
        self._next_id = 1
        self._by_staff: dict[int, Contract] = {}

    def get_for_staff(self, staff_id):
        return self._by_staff.get(int(staff_id))

    def list_for_staff_ids(self, staff_ids):
        return {i: self._by_staff[i] for i in staff_ids if i in self._by_staff}

    def upsert(self, *, staff_id, emp_no, name, department, team, hours) -> int:
        existing = self._by_staff.get(int(staff_id))
        cid = existing.contract_id if existing else self._next_id
        if not existing:
            self._next_id += 1
        self._by_staff[int(staff_id)] = Contract(
            contract_id=cid,
            staff_id=int(staff_id),
            emp_no=emp_no,
            name=name,
            department=department,
            team=team,
            **{k: v for k, v in hours.items()},
        )
        return cid


class FakeHolidayRepo:
    def __init__(self, holidays=None):
        self._rows = [Holiday(holiday_date=d, name=n) for d, n in (holidays or {}).items()]

    def list_between(self, *, start, end):
        return sorted((h for h in self._rows if start <= h.holiday_date <= end), key=lambda h: h.holiday_date)


class FakeAdjustmentRepo:
    def __init__(self, clock):
        self._clock = clock
        self._next_id = 1
        self._rows: dict[int, Adjustment] = {}

    def get(self, adjustment_id):
        return self._rows.get(int(adjustment_id))

    def list_for_date(self, work_date, *, staff_id=None):
        return [
            a
            for a in self._rows.values()
            if a.work_date == work_date and (staff_id is None or a.staff_id == int(staff_id))
        ]

    def create(self, *, staff_id, work_date, status, start, end, memo="", batch_id=None) -> int:
        aid = self._next_id
        self._next_id += 1
        now = self._clock()
        self._rows[aid] = Adjustment(
            adjustment_id=aid,
            staff_id=int(staff_id),
            work_date=work_date,
            status=status,
            start=float(start),
            end=float(end),
            memo=memo or "",
            created_at=now,
            updated_at=now,
            batch_id=batch_id,
        )
        return aid

    def update(self, *, adjustment_id, work_date, status, start, end, memo) -> bool:
        a = self._rows.get(int(adjustment_id))
        if not a:
            return False
        self._rows[a.adjustment_id] = replace(
            a, work_date=work_date, status=status, start=start, end=end, memo=memo, updated_at=self._clock()
        )
        return True

    def delete(self, adjustment_id) -> bool:
        return self._rows.pop(int(adjustment_id), None) is not None

    def delete_by_batch(self, batch_id) -> int:
        ids = [i for i, a in self._rows.items() if a.batch_id == batch_id]
        for i in ids:
            del self._rows[i]
        return len(ids)

    def references(self, staff_id) -> bool:
        return any(a.staff_id == staff_id for a in self._rows.values())


class FakePendingRepo:
    def __init__(self, clock, staff: FakeStaffRepo):
        self._clock = clock
        self._staff = staff
        self._next_id = 1
        self._next_log_id = 1
        self._rows: dict[int, PendingSchedule] = {}
        self._logs: list[ApprovalLog] = []

    def get(self, pending_id):
        return self._rows.get(int(pending_id))

    def search(self, *, staff_ids=None, date_from=None, date_to=None, pending_type=None, state=None, limit=500):
        ids = set(staff_ids) if staff_ids is not None else None
        rows = [
            p
            for p in self._rows.values()
            if (ids is None or p.staff_id in ids)
            and (date_from is None or p.work_date >= date_from)
            and (date_to is None or p.work_date <= date_to)
            and (pending_type is None or p.pending_type == pending_type)
            and (state is None or p.state == state)
        ]
        rows.sort(key=lambda p: (p.work_date, p.staff_id, p.pending_id))
        return rows[:limit]

    def list_approved_for_date(self, work_date, *, staff_id=None):
        staff_ids = [int(staff_id)] if staff_id is not None else None
        return self.search(staff_ids=staff_ids, date_from=work_date, date_to=work_date, state=PendingState.APPROVED)

    def _cell(self, staff_id, work_date, exclude_id=None):
        if not self._staff.get_by_id(staff_id):
            raise NotFoundError("スタッフが見つかりません")
        return [
            p
            for p in self._rows.values()
            if p.staff_id == int(staff_id) and p.work_date == work_date and p.pending_id != exclude_id
        ]

    def create_in_cell(self, *, staff_id, work_date, segments, pending_type, created_by, guard, batch_id=None):
        guard(self._cell(staff_id, work_date))
        now = self._clock()
        ids = []
        for seg in segments:
            pid = self._next_id
            self._next_id += 1
            self._rows[pid] = PendingSchedule(
                pending_id=pid,
                staff_id=int(staff_id),
                work_date=work_date,
                status=seg.status,
                start=float(seg.start),
                end=float(seg.end),
                memo=seg.memo or "",
                pending_type=pending_type,
                created_at=now,
                updated_at=now,
                created_by=created_by,
                batch_id=batch_id,
            )
            ids.append(pid)
        return ids

    def update_in_cell(self, *, pending_id, work_date, status, start, end, memo, guard) -> bool:
        p = self._rows.get(int(pending_id))
        if not p:
            return False
        guard(self._cell(p.staff_id, work_date, exclude_id=p.pending_id))
        if p.state is not PendingState.PENDING:
            return False
        self._rows[p.pending_id] = replace(
            p, work_date=work_date, status=status, start=start, end=end, memo=memo or "", updated_at=self._clock()
        )
        return True

    def mark_approved(self, *, pending_id, approved_by, at) -> bool:
        p = self._rows.get(int(pending_id))
        if not p or p.approved_at is not None:
            return False
        self._rows[p.pending_id] = replace(
            p,
            approved_by=approved_by,
            approved_at=at,
            rejected_by=None,
            rejected_at=None,
            rejection_reason=None,
            updated_at=at,
        )
        return True

    def mark_rejected(self, *, pending_id, rejected_by, reason, at) -> bool:
        p = self._rows.get(int(pending_id))
        if not p or p.state is not PendingState.PENDING:
            return False
        self._rows[p.pending_id] = replace(
            p, rejected_by=rejected_by, rejected_at=at, rejection_reason=reason, updated_at=at
        )
        return True

    def clear_approval(self, *, pending_id, at) -> bool:
        p = self._rows.get(int(pending_id))
        if not p or p.approved_at is None:
            return False
        self._rows[p.pending_id] = replace(p, approved_by=None, approved_at=None, updated_at=at)
        return True

    def delete(self, pending_id) -> bool:
        p = self._rows.get(int(pending_id))
        if not p or p.approved_at is not None:
            return False
        del self._rows[p.pending_id]
        self._logs = [log for log in self._logs if log.pending_id != p.pending_id]
        return True

    def delete_by_batch(self, batch_id) -> int:
        ids = [i for i, p in self._rows.items() if p.batch_id == batch_id]
        for i in ids:
            del self._rows[i]
        return len(ids)

    def add_log(self, *, pending_id, action, actor_id, reason) -> int:
        lid = self._next_log_id
        self._next_log_id += 1
        self._logs.append(
            ApprovalLog(
                log_id=lid, pending_id=int(pending_id), action=action, actor_id=actor_id, reason=reason, created_at=self._clock()
            )
        )
        return lid

    def list_logs(self, pending_id):
        return [log for log in self._logs if log.pending_id == int(pending_id)]

    def references(self, staff_id) -> bool:
        return any(p.staff_id == staff_id for p in self._rows.values())


class FakeUserAuthRepo:
    def __init__(self):
        self._next_id = 1
        self._rows: dict[int, UserAuth] = {}

    def add(self, *, email, password=None, role=Role.STAFF, staff_id=None, is_active=True) -> UserAuth:
        uid = self._next_id
        self._next_id += 1
        self._rows[uid] = UserAuth(
            user_id=uid,
            email=email.lower(),
            password_hash=generate_password_hash(password) if password else None,
            role=role,
            staff_id=staff_id,
            is_active=is_active,
        )
        return self._rows[uid]

    def get_by_id(self, user_id):
        return self._rows.get(int(user_id))

    def get_by_email(self, email):
        return next((u for u in self._rows.values() if u.email == (email or "").lower()), None)

    def update_login_state(self, *, user_id, login_attempts, locked_at) -> bool:
        u = self._rows[int(user_id)]
        self._rows[u.user_id] = replace(u, login_attempts=login_attempts, locked_at=locked_at)
        return True

    def record_login_success(self, *, user_id, at) -> bool:
        u = self._rows[int(user_id)]
        self._rows[u.user_id] = replace(u, login_attempts=0, locked_at=None, last_login_at=at)
        return True

    def set_password(self, *, user_id, password_hash) -> bool:
        u = self._rows[int(user_id)]
        self._rows[u.user_id] = replace(u, password_hash=password_hash, login_attempts=0, locked_at=None)
        return True

    def list_locked(self):
        return [u for u in self._rows.values() if u.locked_at is not None]


class FakeResetTokenRepo:
    def __init__(self, clock):
        self._clock = clock
        self._next_id = 1
        self._rows: dict[int, PasswordResetToken] = {}

    def create(self, *, user_id, token, token_type, expires_at) -> int:
        tid = self._next_id
        self._next_id += 1
        self._rows[tid] = PasswordResetToken(
            token_id=tid,
            user_id=user_id,
            token=token,
            token_type=token_type,
            expires_at=expires_at,
            is_used=False,
            created_at=self._clock(),
        )
        return tid

    def get_by_token(self, token):
        return next((t for t in self._rows.values() if t.token == token), None)

    def invalidate_unused(self, *, user_id, token_type, at) -> int:
        count = 0
        for t in list(self._rows.values()):
            if t.user_id == user_id and t.token_type == token_type and not t.is_used:
                self._rows[t.token_id] = replace(t, is_used=True, used_at=at)
                count += 1
        return count

    def mark_used(self, *, token_id, at) -> bool:
        t = self._rows.get(int(token_id))
        if not t or t.is_used:
            return False
        self._rows[t.token_id] = replace(t, is_used=True, used_at=at)
        return True


class FakeAuditRepo:
    def __init__(self, clock):
        self._clock = clock
        self.logs: list[AuditLog] = []

    def create(self, *, actor_id, action, resource, resource_id, details, success, error_message=None) -> int:
        self.logs.append(
            AuditLog(
                log_id=len(self.logs) + 1,
                actor_id=actor_id,
                action=action,
                resource=resource,
                resource_id=resource_id,
                success=success,
                created_at=self._clock(),
                details=details,
                error_message=error_message,
            )
        )
        return len(self.logs)

    def list_recent(self, *, limit=200, action=None):
        rows = [log for log in reversed(self.logs) if action is None or log.action == action]
        return rows[:limit]

    def actions(self) -> list[str]:
        return [log.action for log in self.logs]


class FakeImportBatchRepo:
    def __init__(self):
        self._rows: dict[str, ImportBatch] = {}

    def create(self, *, batch_id, kind, created_by, created_at) -> None:
        self._rows[batch_id] = ImportBatch(
            batch_id=batch_id, kind=kind, row_count=0, created_at=created_at, created_by=created_by
        )

    def set_row_count(self, batch_id, row_count) -> None:
        self._rows[batch_id] = replace(self._rows[batch_id], row_count=int(row_count))

    def get(self, batch_id) -> Optional[ImportBatch]:
        return self._rows.get(batch_id)

    def list_recent(self, *, limit=200):
        return sorted(self._rows.values(), key=lambda b: b.created_at, reverse=True)[:limit]

    def mark_rolled_back(self, batch_id, *, at) -> bool:
        b = self._rows.get(batch_id)
        if not b or b.rolled_back_at is not None:
            return False
        self._rows[batch_id] = replace(b, rolled_back_at=at)
        return True


class FakeAssignmentRepo:
    def __init__(self, clock):
        self._clock = clock
        self._next_id = 1
        self._rows: dict[int, TemporaryAssignment] = {}

    def get(self, assignment_id):
        return self._rows.get(int(assignment_id))

    def list_for_staff(self, staff_id):
        rows = [a for a in self._rows.values() if a.staff_id == int(staff_id) and a.is_active]
        return sorted(rows, key=lambda a: (a.start_date, a.assignment_id), reverse=True)

    def find_overlapping(self, *, staff_id, start_date, end_date, exclude_id=None):
        return [
            a
            for a in self._rows.values()
            if a.staff_id == int(staff_id)
            and a.is_active
            and a.assignment_id != exclude_id
            and a.start_date <= end_date
            and a.end_date >= start_date
        ]

    def list_active_on(self, day):
        return sorted((a for a in self._rows.values() if a.covers(day)), key=lambda a: (a.staff_id, a.start_date))

    def create(self, *, staff_id, start_date, end_date, temp_department, temp_team, reason, created_by) -> int:
        aid = self._next_id
        self._next_id += 1
        now = self._clock()
        self._rows[aid] = TemporaryAssignment(
            assignment_id=aid,
            staff_id=int(staff_id),
            start_date=start_date,
            end_date=end_date,
            temp_department=temp_department,
            temp_team=temp_team,
            reason=reason,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        return aid

    def update(self, *, assignment_id, start_date, end_date, temp_department, temp_team, reason) -> bool:
        a = self._rows.get(int(assignment_id))
        if not a or not a.is_active:
            return False
        self._rows[a.assignment_id] = replace(
            a,
            start_date=start_date,
            end_date=end_date,
            temp_department=temp_department,
            temp_team=temp_team,
            reason=reason,
            updated_at=self._clock(),
        )
        return True

    def deactivate(self, assignment_id) -> bool:
        a = self._rows.get(int(assignment_id))
        if not a or not a.is_active:
            return False
        self._rows[a.assignment_id] = replace(a, is_active=False, updated_at=self._clock())
        return True

    def references(self, staff_id) -> bool:
        return any(a.staff_id == staff_id for a in self._rows.values())


class FakeResponsibilityRepo:
    def __init__(self, clock):
        self._clock = clock
        self._rows: dict[tuple[int, date], StaffResponsibility] = {}

    def get(self, staff_id, work_date):
        return self._rows.get((int(staff_id), work_date))

    def list_between(self, *, start, end):
        rows = [r for r in self._rows.values() if start <= r.work_date <= end]
        return sorted(rows, key=lambda r: (r.work_date, r.staff_id))

    def upsert(self, *, staff_id, work_date, duties, updated_by) -> None:
        self._rows[(int(staff_id), work_date)] = StaffResponsibility(
            staff_id=int(staff_id),
            work_date=work_date,
            duties=dict(duties),
            updated_by=updated_by,
            updated_at=self._clock(),
        )


# ----------------------------
# Fixtures
# ----------------------------

# Monday
WORK_DATE = date(2025, 6, 23)


@pytest.fixture(autouse=True)
def _testing_env(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 6, 20, 9, 0, 0)


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


@pytest.fixture
def container(clock):
    staff = FakeStaffRepo()
    adjustments = FakeAdjustmentRepo(clock)
    pending = FakePendingRepo(clock, staff)
    assignments = FakeAssignmentRepo(clock)
    staff._refs = lambda staff_id: (
        adjustments.references(staff_id) or pending.references(staff_id) or assignments.references(staff_id)
    )

    return assemble(
        staff_repo=staff,
        contracts_repo=FakeContractRepo(),
        holidays_repo=FakeHolidayRepo({date(2025, 7, 21): "海の日"}),
        adjustments_repo=adjustments,
        pending_repo=pending,
        users_repo=FakeUserAuthRepo(),
        reset_tokens_repo=FakeResetTokenRepo(clock),
        audit_repo=FakeAuditRepo(clock),
        batches_repo=FakeImportBatchRepo(),
        assignments_repo=assignments,
        responsibilities_repo=FakeResponsibilityRepo(clock),
        preset_store=InMemoryKeyValueStore(),
        mailer=RecordingMailer(),
        jwt_secret=JWT_SECRET,
        clock=clock,
    )


@pytest.fixture
def roster(container):
    """Two active staff with weekday contracts plus an admin and a staff login."""

    staff = container.staff_repo
    s1 = staff.add(emp_no="1001", name="佐藤 太郎")
    s2 = staff.add(emp_no="1002", name="鈴木 花子")
    weekdays = {
        "monday_hours": "09:00-18:00",
        "tuesday_hours": "09:00-18:00",
        "wednesday_hours": "09:00-18:00",
        "thursday_hours": "09:00-18:00",
        "friday_hours": "09:00-18:00",
    }
    for s in (s1, s2):
        container.contracts_repo.upsert(
            staff_id=s.staff_id, emp_no=s.emp_no, name=s.name, department=s.department, team=s.team, hours=weekdays
        )

    admin = container.users_repo.add(email="admin@example.com", password=ADMIN_PASSWORD, role=Role.ADMIN)
    user = container.users_repo.add(
        email="sato@example.com", password=STAFF_PASSWORD, role=Role.STAFF, staff_id=s1.staff_id
    )
    return {"staff": [s1, s2], "admin": admin, "user": user}
