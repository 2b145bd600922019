"""Derive contract-layer schedule entries from a staff member's weekly contract."""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import Iterable, Mapping, Optional

from ..core.constants import CONTRACT_MEMO
from ..core.enums import Layer
from ..schedules.model import ScheduleEntry
from ..staff.model import Staff
from ..timeline.position import parse_time_string
from .model import Contract

logger = logging.getLogger(__name__)

CONTRACT_HOURS_RE = re.compile(r"^(\d{1,2}:\d{2})-(\d{1,2}:\d{2})$")
CONTRACT_STATUS = "online"


def parse_contract_hours(value: Optional[str]) -> Optional[tuple[float, float]]:
    """ "9:00-18:00" -> (9.0, 18.0); None for an empty day or a malformed range."""

    if not value or not value.strip():
        return None
    m = CONTRACT_HOURS_RE.match(value.strip())
    if not m:
        return None
    start, end = parse_time_string(m.group(1)), parse_time_string(m.group(2))
    if start >= end:
        return None
    return start, end


def contract_entries_for_day(staff: Staff, contract: Optional[Contract], work_date: date) -> list[ScheduleEntry]:
    if contract is None or not staff.is_active:
        return []

    raw = contract.hours_for(work_date)
    if not raw or not raw.strip():
        return []

    parsed = parse_contract_hours(raw)
    if parsed is None:
        logger.warning(
            "Skipping malformed contract hours %r for staff %s on %s", raw, staff.staff_id, work_date.isoformat()
        )
        return []

    start, end = parsed
    return [
        ScheduleEntry(
            entry_id=f"contract_{contract.contract_id}_{work_date.isoformat()}",
            staff_id=staff.staff_id,
            work_date=work_date,
            status=CONTRACT_STATUS,
            start=start,
            end=end,
            memo=CONTRACT_MEMO,
            layer=Layer.CONTRACT,
        )
    ]


def contract_entries(
    staff: Iterable[Staff],
    contracts: Mapping[int, Contract],
    work_date: date,
) -> list[ScheduleEntry]:
    out: list[ScheduleEntry] = []
    for s in staff:
        out.extend(contract_entries_for_day(s, contracts.get(s.staff_id), work_date))
    return out
