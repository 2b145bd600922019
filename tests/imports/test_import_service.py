from __future__ import annotations

from datetime import date, timedelta

import pytest

from src.shift_planner.shift_planner.core.exceptions import ConflictError, ImportValidationError, NotFoundError

PAYLOAD = {
    "employeeData": [
        {"empNo": "1001", "name": "佐藤 太郎", "dept": "サポート課", "team": "Aチーム", "mondayHours": "09:00-17:00"},
        {"empNo": "2001", "name": "山田 次郎", "dept": "サポート課", "team": "Bチーム", "mondayHours": "13:00-21:00"},
    ]
}


def test_staff_sync_upserts_and_soft_disables_missing(container, roster):
    result = container.import_service.sync_staff(PAYLOAD, actor_id=1)

    assert (result["added"], result["updated"], result["deactivated"]) == (1, 1, 1)
    sato = container.staff_repo.get_by_emp_no("1001")
    yamada = container.staff_repo.get_by_emp_no("2001")
    suzuki = container.staff_repo.get_by_emp_no("1002")
    assert sato.batch_id is None and yamada.batch_id == result["batchId"]
    assert not suzuki.is_active
    assert container.contracts_repo.get_for_staff(sato.staff_id).monday_hours == "09:00-17:00"
    assert "IMPORT" in container.audit_repo.actions()


def test_invalid_character_aborts_whole_batch(container, roster):
    payload = {"staff": [dict(PAYLOAD["employeeData"][1]), {"empNo": "3001", "name": "bad@name"}]}

    with pytest.raises(ImportValidationError) as exc:
        container.import_service.sync_staff(payload)

    assert exc.value.errors[0]["row"] == 2
    assert exc.value.errors[0]["field"] == "name"
    assert exc.value.errors[0]["invalid_chars"] == ["@"]
    assert container.staff_repo.get_by_emp_no("2001") is None
    assert container.import_service.history() == []


def test_schedule_import_tags_rows_and_skips_unknown_staff(container, roster):
    csv_text = (
        "empNo,date,name,status,time,memo\n"
        "1001,2025-06-23,佐藤,remote,10:00-19:00,\n"
        "9999,2025-06-23,不明,online,09:00-18:00,\n"
        "1002,2025-06-23,鈴木,,,\n"
    )

    result = container.import_service.import_schedules(csv_text, actor_id=1)

    assert (result["imported"], result["skipped"]) == (1, 1)
    assert [d["action"] for d in result["details"]] == ["created", "skipped", "empty"]
    rows = container.adjustments_repo.list_for_date(date(2025, 6, 23))
    assert [r.batch_id for r in rows] == [result["batchId"]]


def test_schedule_import_format_errors_create_nothing(container, roster):
    csv_text = "empNo,date,name,status,time,memo\n1001,2025-06-23,佐藤,remote,10-19,\n"

    with pytest.raises(ImportValidationError):
        container.import_service.import_schedules(csv_text)

    assert container.adjustments_repo.list_for_date(date(2025, 6, 23)) == []


def _import_one(container):
    return container.import_service.import_schedules(
        "empNo,date,name,status,time,memo\n1001,2025-06-23,佐藤,remote,10:00-19:00,\n", actor_id=1
    )["batchId"]


def test_rollback_allowed_just_before_24_hours(container, roster, clock):
    batch_id = _import_one(container)

    clock.advance(timedelta(hours=23, minutes=59))
    result = container.import_service.rollback(batch_id, actor_id=1)

    assert result["deletedSchedules"] == 1
    assert container.adjustments_repo.list_for_date(date(2025, 6, 23)) == []
    [entry] = container.import_service.history()
    assert entry["rolledBackAt"] is not None and entry["canRollback"] is False
    with pytest.raises(ConflictError):
        container.import_service.rollback(batch_id)


def test_rollback_refused_after_24_hours(container, roster, clock):
    batch_id = _import_one(container)

    clock.advance(timedelta(hours=24, minutes=1))
    with pytest.raises(ConflictError):
        container.import_service.rollback(batch_id)

    assert len(container.adjustments_repo.list_for_date(date(2025, 6, 23))) == 1


def test_rollback_of_staff_sync_deletes_unreferenced_and_disables_referenced(container, roster):
    payload = {
        "staff": [
            {"empNo": "1001", "name": "佐藤 太郎"},
            {"empNo": "1002", "name": "鈴木 花子"},
            {"empNo": "3001", "name": "新人 一号"},
            {"empNo": "3002", "name": "新人 二号"},
        ]
    }
    batch_id = container.import_service.sync_staff(payload, actor_id=1)["batchId"]
    busy = container.staff_repo.get_by_emp_no("3002")
    container.schedule_service.create_adjustment(
        staff_id=busy.staff_id, work_date=date(2025, 6, 23), status="online", start=9, end=18
    )

    result = container.import_service.rollback(batch_id, actor_id=1)

    assert (result["deletedStaff"], result["deactivatedStaff"]) == (1, 1)
    assert container.staff_repo.get_by_emp_no("3001") is None
    assert container.staff_repo.get_by_emp_no("3002").is_active is False


def test_rollback_unknown_batch(container):
    with pytest.raises(NotFoundError):
        container.import_service.rollback("no-such-batch")
