"""Drop preset segments that would exactly repeat what the day already shows.

Only exact repeats are suppressed. A segment that merely overlaps an entry is
still submitted and stacks on top of it.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..schedules.model import ScheduleEntry, Segment

_EPS = 1e-9


def overlaps(seg: Segment, entry: ScheduleEntry) -> bool:
    return seg.start < entry.end and seg.end > entry.start


def top_overlapping(seg: Segment, existing: Iterable[ScheduleEntry]) -> Optional[ScheduleEntry]:
    """Highest-layer entry overlapping `seg`; the first one found wins a tie."""

    top: Optional[ScheduleEntry] = None
    for entry in existing:
        if not overlaps(seg, entry):
            continue
        if top is None or entry.effective_layer.priority > top.effective_layer.priority:
            top = entry
    return top


def is_exact_match(seg: Segment, entry: ScheduleEntry) -> bool:
    return (
        abs(seg.start - entry.start) < _EPS
        and abs(seg.end - entry.end) < _EPS
        and seg.status == entry.status
        and (seg.memo or "") == (entry.memo or "")
    )


def filter_duplicates(segments: Iterable[Segment], existing: Sequence[ScheduleEntry]) -> list[Segment]:
    kept: list[Segment] = []
    for seg in segments:
        top = top_overlapping(seg, existing)
        if top is not None and is_exact_match(seg, top):
            continue
        kept.append(seg)
    return kept
