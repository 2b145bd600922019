from __future__ import annotations

from datetime import date, datetime

from src.shift_planner.shift_planner.core.enums import Layer
from src.shift_planner.shift_planner.presets.duplicate_filter import filter_duplicates, top_overlapping
from src.shift_planner.shift_planner.schedules.model import ScheduleEntry, Segment

DAY = date(2025, 6, 23)


def _existing(status="online", start=9, end=18, memo="", layer=Layer.ADJUSTMENT, entry_id="adj_1"):
    return ScheduleEntry(
        entry_id=entry_id,
        staff_id=1,
        work_date=DAY,
        status=status,
        start=start,
        end=end,
        memo=memo,
        layer=layer,
        updated_at=datetime(2025, 6, 20, 9),
    )


def test_exact_repeat_is_dropped():
    seg = Segment.from_dict({"status": "online", "startTime": 9, "endTime": 18, "memo": ""})

    assert filter_duplicates([seg], [_existing()]) == []


def test_different_memo_is_kept():
    seg = Segment.from_dict({"status": "online", "startTime": 9, "endTime": 18, "memo": "x"})

    assert filter_duplicates([seg], [_existing()]) == [seg]


def test_overlap_without_exact_match_is_kept():
    seg = Segment("meeting", 10, 12)

    assert filter_duplicates([seg], [_existing()]) == [seg]


def test_only_the_top_layer_is_compared():
    contract = _existing(layer=Layer.CONTRACT, entry_id="contract_1")
    adjustment = _existing(status="remote", start=10, end=19, entry_id="adj_2")
    # Would repeat the contract, but the adjustment covers it.
    seg = Segment("online", 9, 18)

    assert top_overlapping(seg, [contract, adjustment]) is adjustment
    assert filter_duplicates([seg], [contract, adjustment]) == [seg]


def test_first_found_wins_a_layer_tie():
    first = _existing(entry_id="adj_1")
    second = _existing(status="remote", entry_id="adj_2")

    assert top_overlapping(Segment("online", 9, 18), [first, second]) is first


def test_no_existing_entries_keeps_everything():
    segs = [Segment("online", 9, 12), Segment("break", 12, 13)]

    assert filter_duplicates(segs, []) == segs
