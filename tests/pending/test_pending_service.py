from __future__ import annotations

from datetime import date

import pytest

from src.shift_planner.shift_planner.core.enums import ApprovalAction, PendingState, PendingType, Role
from src.shift_planner.shift_planner.core.exceptions import AuthorizationError, ConflictError, ValidationError

DAY = date(2025, 6, 23)


def _submit(container, staff_id, *, segments=None, work_date=DAY):
    return container.pending_service.submit(
        current_role=Role.ADMIN,
        current_staff_id=None,
        actor_id=1,
        staff_id=staff_id,
        work_date=work_date,
        segments=segments or [{"status": "remote", "start": 10, "end": 19}],
    )


def test_submit_creates_pending_rows(container, roster):
    staff_id = roster["staff"][0].staff_id

    created = _submit(container, staff_id)

    assert len(created) == 1
    p = created[0]
    assert p.state is PendingState.PENDING
    assert p.pending_type is PendingType.MONTHLY_PLANNER
    assert [log.action for log in container.pending_service.history(p.pending_id)] == [ApprovalAction.PENDING]


def test_composite_submission_is_stored_per_segment(container, roster):
    staff_id = roster["staff"][0].staff_id

    created = _submit(
        container,
        staff_id,
        segments=[
            {"status": "online", "start": 9, "end": 12},
            {"status": "break", "start": 12, "end": 13},
            {"status": "online", "start": 13, "end": 18},
        ],
    )

    assert [(p.start, p.end) for p in created] == [(9, 12), (12, 13), (13, 18)]


def test_one_unresolved_entry_per_cell(container, roster):
    staff_id = roster["staff"][0].staff_id
    _submit(container, staff_id)

    with pytest.raises(ConflictError):
        _submit(container, staff_id)


def test_approved_cell_refuses_new_submissions(container, roster):
    staff_id = roster["staff"][0].staff_id
    p = _submit(container, staff_id)[0]
    container.pending_service.approve(actor_id=1, pending_id=p.pending_id)

    with pytest.raises(ConflictError, match="承認済み"):
        _submit(container, staff_id)


def test_rejected_cell_accepts_a_resubmission(container, roster):
    staff_id = roster["staff"][0].staff_id
    p = _submit(container, staff_id)[0]
    container.pending_service.reject(actor_id=1, pending_id=p.pending_id, reason="人数不足")

    assert len(_submit(container, staff_id)) == 1


def test_reject_requires_a_reason(container, roster):
    p = _submit(container, roster["staff"][0].staff_id)[0]

    with pytest.raises(ValidationError):
        container.pending_service.reject(actor_id=1, pending_id=p.pending_id, reason="")


def test_approved_entry_cannot_be_deleted_until_unapproved(container, roster):
    service = container.pending_service
    p = _submit(container, roster["staff"][0].staff_id)[0]
    service.approve(actor_id=1, pending_id=p.pending_id)

    with pytest.raises(ConflictError):
        service.delete(current_role=Role.ADMIN, current_staff_id=None, actor_id=1, pending_id=p.pending_id)

    with pytest.raises(ValidationError):
        service.unapprove(actor_id=1, pending_id=p.pending_id, reason=" ")

    reverted = service.unapprove(actor_id=1, pending_id=p.pending_id, reason="再調整")
    assert reverted.state is PendingState.PENDING

    service.delete(current_role=Role.ADMIN, current_staff_id=None, actor_id=1, pending_id=p.pending_id)
    assert service.search() == []


def test_approve_after_reject_clears_rejection(container, roster):
    service = container.pending_service
    p = _submit(container, roster["staff"][0].staff_id)[0]
    service.reject(actor_id=1, pending_id=p.pending_id, reason="要確認")

    approved = service.approve(actor_id=1, pending_id=p.pending_id)

    assert approved.state is PendingState.APPROVED
    assert approved.rejection_reason is None and approved.rejected_at is None
    with pytest.raises(ConflictError):
        service.approve(actor_id=1, pending_id=p.pending_id)


def test_transitions_are_audited(container, roster):
    service = container.pending_service
    p = _submit(container, roster["staff"][0].staff_id)[0]
    service.approve(actor_id=1, pending_id=p.pending_id)
    service.unapprove(actor_id=1, pending_id=p.pending_id, reason="差し戻し")

    assert container.audit_repo.actions() == ["PENDING_APPROVE", "PENDING_UNAPPROVE"]


def test_staff_user_only_touches_own_cells(container, roster):
    own, other = roster["staff"]

    with pytest.raises(AuthorizationError):
        container.pending_service.submit(
            current_role=Role.STAFF,
            current_staff_id=own.staff_id,
            actor_id=2,
            staff_id=other.staff_id,
            work_date=DAY,
            segments=[{"status": "off", "start": 9, "end": 18}],
        )


def test_update_moves_entry_only_into_a_free_cell(container, roster):
    service = container.pending_service
    staff_id = roster["staff"][0].staff_id
    p = _submit(container, staff_id)[0]
    _submit(container, staff_id, work_date=date(2025, 6, 24))

    edited = service.update(
        current_role=Role.ADMIN, current_staff_id=None, pending_id=p.pending_id, changes={"start": 11, "memo": "通院"}
    )
    assert (edited.start, edited.memo) == (11, "通院")

    with pytest.raises(ConflictError):
        service.update(
            current_role=Role.ADMIN,
            current_staff_id=None,
            pending_id=p.pending_id,
            changes={"date": date(2025, 6, 24)},
        )



def test_same_day_edit_refused_once_a_sibling_segment_is_approved(container, roster):
    service = container.pending_service
    staff_id = roster["staff"][0].staff_id
    first, second = _submit(
        container,
        staff_id,
        segments=[{"status": "online", "start": 9, "end": 12}, {"status": "remote", "start": 13, "end": 18}],
    )

    service.update(
        current_role=Role.ADMIN, current_staff_id=None, pending_id=second.pending_id, changes={"memo": "在宅"}
    )
    service.approve(actor_id=1, pending_id=first.pending_id)

    with pytest.raises(ConflictError):
        service.update(
            current_role=Role.ADMIN, current_staff_id=None, pending_id=second.pending_id, changes={"status": "meeting"}
        )
    assert service.history(second.pending_id)[-1].action is ApprovalAction.PENDING
    assert container.pending_repo.get(second.pending_id).status == "remote"

def test_bulk_decide_reports_per_item_outcome(container, roster):
    s1, s2 = roster["staff"]
    a = _submit(container, s1.staff_id)[0]
    b = _submit(container, s2.staff_id)[0]
    container.pending_service.approve(actor_id=1, pending_id=b.pending_id)

    result = container.pending_service.bulk_decide(
        actor_id=1, pending_ids=[a.pending_id, b.pending_id, 999], action="approve"
    )

    assert result["successCount"] == 1 and result["successes"] == [a.pending_id]
    assert result["errorCount"] == 2


def test_monthly_listing_includes_staff_names(container, roster):
    s1 = roster["staff"][0]
    _submit(container, s1.staff_id)
    _submit(container, s1.staff_id, work_date=date(2025, 7, 1))

    june = container.pending_service.list_for_month(year=2025, month=6)

    assert [(row["date"], row["staffName"]) for row in june] == [("2025-06-23", s1.name)]
