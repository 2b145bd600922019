from __future__ import annotations

from datetime import date

from src.shift_planner.shift_planner.imports.parser import parse_csv, parse_schedule_rows

CSV = "\ufeffempNo,date,name,status,time,memo\n1001,2025-06-23,佐藤,remote,10:00-19:00,在宅\n\n1002,2025/06/24,鈴木,,,\n"


def test_parse_csv_strips_bom_and_blank_lines():
    rows = parse_csv(CSV)

    assert len(rows) == 2
    assert rows[0]["empNo"] == "1001"
    assert rows[1]["date"] == "2025/06/24"


def test_schedule_rows_parse_time_ranges_and_empty_rows():
    parsed, errors = parse_schedule_rows(parse_csv(CSV))

    assert errors == []
    first, second = parsed
    assert (first.work_date, first.start, first.end, first.memo) == (date(2025, 6, 23), 10.0, 19.0, "在宅")
    assert first.has_schedule
    assert second.work_date == date(2025, 6, 24) and not second.has_schedule


def test_schedule_row_errors_are_collected_per_row():
    rows = [
        {"empNo": "", "date": "2025-06-23", "status": "online", "time": "09:00-18:00"},
        {"empNo": "1001", "date": "23/06/2025", "status": "online", "time": "09:00-18:00"},
        {"empNo": "1002", "date": "2025-06-23", "status": "online", "time": "18:00-09:00"},
        {"empNo": "1003", "date": "2025-06-23", "status": "online", "time": "09:10-18:00"},
        {"empNo": "1004", "date": "2025-06-23", "status": "online", "time": "09:00-18:00"},
    ]

    parsed, errors = parse_schedule_rows(rows)

    assert [p.emp_no for p in parsed] == ["1004"]
    assert [e["row"] for e in errors] == [1, 2, 3, 4]
