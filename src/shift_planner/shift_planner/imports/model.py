from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from ..common.datetime_utils import iso_or_none
from ..core.constants import ROLLBACK_WINDOW


class ImportKind(str, Enum):
    STAFF = "staff"
    SCHEDULES = "schedules"


@dataclass(frozen=True)
class ImportBatch:
    batch_id: str
    kind: ImportKind
    row_count: int
    created_at: datetime
    created_by: Optional[int] = None
    rolled_back_at: Optional[datetime] = None

    def can_rollback(self, now: datetime) -> bool:
        return self.rolled_back_at is None and now - self.created_at < ROLLBACK_WINDOW

    def to_dict(self, *, now: Optional[datetime] = None) -> dict:
        data = {
            "batchId": self.batch_id,
            "kind": self.kind.value,
            "count": self.row_count,
            "createdAt": iso_or_none(self.created_at),
            "createdBy": self.created_by,
            "rolledBackAt": iso_or_none(self.rolled_back_at),
        }
        if now is not None:
            data["canRollback"] = self.can_rollback(now)
        return data
