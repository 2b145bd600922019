from __future__ import annotations

from datetime import date

import pytest

from src.shift_planner.shift_planner.core.enums import Role
from src.shift_planner.shift_planner.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.shift_planner.shift_planner.responsibilities.model import is_reception

DAY = date(2025, 6, 23)


@pytest.fixture
def reception(container, roster):
    return container.staff_repo.add(emp_no="1003", name="高橋 次郎", department="受付課", team="受付チーム")


def _save(container, staff_id, duties, *, role=Role.ADMIN, current_staff_id=None, work_date=DAY):
    return container.responsibility_service.save(
        current_role=role,
        current_staff_id=current_staff_id,
        actor_id=1,
        staff_id=staff_id,
        work_date=work_date,
        duties=duties,
    )


@pytest.mark.parametrize(
    "department, team, expected",
    [("受付課", "Aチーム", True), ("サポート課", "受付チーム", True), ("サポート課", "Aチーム", False)],
)
def test_reception_is_detected_from_department_or_team(department, team, expected):
    assert is_reception(department, team) is expected


def test_unsaved_day_returns_the_empty_shape(container, roster, reception):
    general = container.responsibility_service.get(roster["staff"][0].staff_id, DAY)
    front = container.responsibility_service.get(reception.staff_id, DAY)

    assert general.duties == {"fax": False, "subjectCheck": False, "custom": ""}
    assert front.duties == {"lunch": False, "fax": False, "cs": False, "custom": ""}


def test_save_fills_missing_flags_and_trims_custom(container, roster):
    saved = _save(container, roster["staff"][0].staff_id, {"fax": True, "custom": "  朝礼当番 "})

    assert saved.duties == {"fax": True, "subjectCheck": False, "custom": "朝礼当番"}
    assert saved.to_dict()["hasResponsibilities"] is True


def test_save_overwrites_the_same_day(container, roster):
    staff_id = roster["staff"][0].staff_id
    _save(container, staff_id, {"fax": True})
    _save(container, staff_id, {"subjectCheck": True})

    [row] = container.responsibility_service.list_for_date(DAY)
    assert row.duties == {"fax": False, "subjectCheck": True, "custom": ""}


def test_flag_outside_the_staff_shape_is_rejected(container, roster, reception):
    with pytest.raises(ValidationError):
        _save(container, roster["staff"][0].staff_id, {"lunch": True})
    with pytest.raises(ValidationError):
        _save(container, reception.staff_id, {"subjectCheck": True})


def test_non_boolean_flag_is_rejected(container, roster):
    with pytest.raises(ValidationError):
        _save(container, roster["staff"][0].staff_id, {"fax": "yes"})


def test_staff_may_only_edit_their_own_duties(container, roster):
    s1, s2 = roster["staff"]

    _save(container, s1.staff_id, {"fax": True}, role=Role.STAFF, current_staff_id=s1.staff_id)
    with pytest.raises(AuthorizationError):
        _save(container, s2.staff_id, {"fax": True}, role=Role.STAFF, current_staff_id=s1.staff_id)


def test_unknown_staff_is_not_found(container, roster):
    with pytest.raises(NotFoundError):
        _save(container, 999, {"fax": True})


def test_clear_resets_to_the_empty_shape(container, roster, reception):
    _save(container, reception.staff_id, {"lunch": True, "cs": True})

    cleared = container.responsibility_service.clear(
        current_role=Role.ADMIN, current_staff_id=None, actor_id=1, staff_id=reception.staff_id, work_date=DAY
    )

    assert cleared.duties == {"lunch": False, "fax": False, "cs": False, "custom": ""}
    assert cleared.to_dict()["hasResponsibilities"] is False


def test_status_lists_every_active_staff(container, roster, reception):
    s1, s2 = roster["staff"]
    _save(container, s1.staff_id, {"custom": "来客対応"})

    rows = {r["staffId"]: r for r in container.responsibility_service.status_for_date(DAY)}

    assert set(rows) == {s1.staff_id, s2.staff_id, reception.staff_id}
    assert rows[s1.staff_id]["hasResponsibilities"] is True
    assert rows[s2.staff_id]["hasResponsibilities"] is False
    assert rows[reception.staff_id]["isReception"] is True
    assert "lunch" in rows[reception.staff_id]["responsibilities"]


def test_month_listing_covers_the_whole_month(container, roster):
    staff_id = roster["staff"][0].staff_id
    _save(container, staff_id, {"fax": True}, work_date=date(2025, 6, 1))
    _save(container, staff_id, {"fax": True}, work_date=date(2025, 6, 30))
    _save(container, staff_id, {"fax": True}, work_date=date(2025, 7, 1))

    rows = container.responsibility_service.list_for_month(2025, 6)

    assert [r.work_date for r in rows] == [date(2025, 6, 1), date(2025, 6, 30)]
    with pytest.raises(ValidationError):
        container.responsibility_service.list_for_month(2025, 13)
