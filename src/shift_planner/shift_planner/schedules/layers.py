"""Two-layer schedule resolution.

Contract entries form the base layer, adjustment entries are painted over them.
Overlap is allowed; only the order decides what ends up on top.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime
from typing import Container, Iterable

from ..core.enums import Layer
from ..timeline.colors import status_color
from ..timeline.position import time_to_position_percent
from .model import ScheduleEntry

_EPOCH = datetime.min


def _paint_order(entry: ScheduleEntry):
    layer = entry.effective_layer
    if layer is Layer.ADJUSTMENT:
        return layer.priority, entry.updated_at or _EPOCH
    return layer.priority, _EPOCH


def resolve_day(entries: Iterable[ScheduleEntry], *, work_date: date, holidays: Container[date]) -> list[ScheduleEntry]:
    """Order one staff member's entries for one date, bottom layer first.

    Contract entries are left out on holidays. Adjustments are ordered by
    `updated_at` ascending so the latest edit paints last.
    """

    is_holiday = work_date in holidays
    kept = [e for e in entries if not (is_holiday and e.effective_layer is Layer.CONTRACT)]
    return sorted(kept, key=_paint_order)


def resolve_many(entries: Iterable[ScheduleEntry], *, holidays: Container[date]) -> list[ScheduleEntry]:
    """Resolve a mixed list grouped by (staff, date); groups keep first-seen order."""

    groups: dict[tuple[int, date], list[ScheduleEntry]] = defaultdict(list)
    for e in entries:
        groups[(e.staff_id, e.work_date)].append(e)

    out: list[ScheduleEntry] = []
    for (_, work_date), group in groups.items():
        out.extend(resolve_day(group, work_date=work_date, holidays=holidays))
    return out


def bar_style(entry: ScheduleEntry) -> dict:
    start_pos = time_to_position_percent(entry.start)
    end_pos = time_to_position_percent(entry.end)
    is_contract = entry.effective_layer is Layer.CONTRACT
    return {
        "left": start_pos,
        "width": end_pos - start_pos,
        "backgroundColor": status_color(entry.status),
        "opacity": 0.5 if is_contract else 1,
        "zIndex": 10 if is_contract else 30,
        "isContract": is_contract,
    }
