from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Adjustment


class AdjustmentRepository(Protocol):
    def get(self, adjustment_id: int) -> Optional[Adjustment]:
        raise NotImplementedError

    def list_for_date(self, work_date: date, *, staff_id: Optional[int] = None) -> Sequence[Adjustment]:
        raise NotImplementedError

    def create(
        self,
        *,
        staff_id: int,
        work_date: date,
        status: str,
        start: float,
        end: float,
        memo: str = "",
        batch_id: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update(
        self,
        *,
        adjustment_id: int,
        work_date: date,
        status: str,
        start: float,
        end: float,
        memo: str,
    ) -> bool:
        raise NotImplementedError

    def delete(self, adjustment_id: int) -> bool:
        raise NotImplementedError

    def delete_by_batch(self, batch_id: str) -> int:
        raise NotImplementedError
