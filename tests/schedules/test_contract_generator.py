from __future__ import annotations

from datetime import date

from src.shift_planner.shift_planner.contracts.generator import (
    contract_entries,
    contract_entries_for_day,
    parse_contract_hours,
)
from src.shift_planner.shift_planner.contracts.model import Contract
from src.shift_planner.shift_planner.core.constants import CONTRACT_MEMO
from src.shift_planner.shift_planner.core.enums import Layer
from src.shift_planner.shift_planner.staff.model import Staff

MONDAY = date(2025, 6, 23)
SATURDAY = date(2025, 6, 28)


def _staff(staff_id=1, *, is_active=True):
    return Staff(staff_id=staff_id, emp_no=str(1000 + staff_id), name="佐藤", department="課", team="班", is_active=is_active)


def _contract(staff_id=1, **hours):
    return Contract(contract_id=10 + staff_id, staff_id=staff_id, emp_no=None, name="佐藤", department="課", team="班", **hours)


def test_parse_contract_hours():
    assert parse_contract_hours("09:00-18:00") == (9.0, 18.0)
    assert parse_contract_hours("9:30-17:45") == (9.5, 17.75)
    assert parse_contract_hours("") is None
    assert parse_contract_hours("18:00-09:00") is None
    assert parse_contract_hours("nine to six") is None


def test_weekday_contract_produces_one_contract_entry():
    entries = contract_entries_for_day(_staff(), _contract(monday_hours="09:00-18:00"), MONDAY)

    assert len(entries) == 1
    e = entries[0]
    assert (e.start, e.end, e.status) == (9.0, 18.0, "online")
    assert e.layer is Layer.CONTRACT
    assert e.memo == CONTRACT_MEMO
    assert e.entry_id == "contract_11_2025-06-23"


def test_empty_day_inactive_staff_and_malformed_hours_produce_nothing():
    contract = _contract(monday_hours="09:00-18:00", saturday_hours="garbage")

    assert contract_entries_for_day(_staff(), contract, SATURDAY) == []
    assert contract_entries_for_day(_staff(is_active=False), contract, MONDAY) == []
    assert contract_entries_for_day(_staff(), None, MONDAY) == []
    assert contract_entries_for_day(_staff(), _contract(monday_hours="  "), MONDAY) == []


def test_contract_entries_for_roster():
    staff = [_staff(1), _staff(2), _staff(3)]
    contracts = {1: _contract(1, monday_hours="09:00-18:00"), 2: _contract(2, tuesday_hours="10:00-16:00")}

    entries = contract_entries(staff, contracts, MONDAY)

    assert [e.staff_id for e in entries] == [1]
