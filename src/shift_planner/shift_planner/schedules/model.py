from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import iso_or_none
from ..core.constants import MASKED_MEMO
from ..core.enums import Layer
from ..timeline.colors import status_color, status_text_color


@dataclass(frozen=True)
class Adjustment:
    """Persisted adjustment-layer row (user-created override for one day)."""

    adjustment_id: int
    staff_id: int
    work_date: date
    status: str
    start: float
    end: float
    memo: str
    created_at: datetime
    updated_at: datetime
    batch_id: Optional[str] = None


@dataclass(frozen=True)
class ScheduleEntry:
    """Resolved entry as rendered on the day timeline.

    `layer` None means the producer did not tag the entry; it is treated as an adjustment.
    """

    entry_id: str
    staff_id: int
    work_date: date
    status: str
    start: float
    end: float
    memo: str = ""
    layer: Optional[Layer] = None
    updated_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None

    @property
    def effective_layer(self) -> Layer:
        return self.layer or Layer.ADJUSTMENT

    @property
    def is_approved_pending(self) -> bool:
        return self.approved_at is not None

    @classmethod
    def from_adjustment(cls, adj: Adjustment) -> "ScheduleEntry":
        return cls(
            entry_id=f"adj_{adj.adjustment_id}",
            staff_id=adj.staff_id,
            work_date=adj.work_date,
            status=adj.status,
            start=adj.start,
            end=adj.end,
            memo=adj.memo or "",
            layer=Layer.ADJUSTMENT,
            updated_at=adj.updated_at,
        )

    def to_dict(self, *, mask_memo: bool = False) -> dict:
        memo = self.memo or ""
        if mask_memo and memo:
            memo = MASKED_MEMO
        return {
            "id": self.entry_id,
            "staffId": self.staff_id,
            "date": self.work_date.isoformat(),
            "status": self.status,
            "start": self.start,
            "end": self.end,
            "memo": memo,
            "layer": self.effective_layer.value,
            "updatedAt": iso_or_none(self.updated_at),
            "approvedAt": iso_or_none(self.approved_at),
            "isApprovedPending": self.is_approved_pending,
            "color": status_color(self.status),
            "textColor": status_text_color(self.status),
        }


@dataclass(frozen=True)
class Segment:
    """One (status, start, end, memo) slice of a preset or a composite submission."""

    status: str
    start: float
    end: float
    memo: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Segment":
        return cls(
            status=str(data.get("status") or "").strip(),
            start=data.get("start", data.get("startTime")),
            end=data.get("end", data.get("endTime")),
            memo=str(data.get("memo") or ""),
        )

    def to_dict(self) -> dict:
        return {"status": self.status, "start": self.start, "end": self.end, "memo": self.memo}
