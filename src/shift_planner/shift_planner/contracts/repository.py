from __future__ import annotations

from typing import Iterable, Mapping, Optional, Protocol

from .model import Contract


class ContractRepository(Protocol):
    def get_for_staff(self, staff_id: int) -> Optional[Contract]:
        raise NotImplementedError

    def list_for_staff_ids(self, staff_ids: Iterable[int]) -> Mapping[int, Contract]:
        raise NotImplementedError

    def upsert(
        self,
        *,
        staff_id: int,
        emp_no: Optional[str],
        name: str,
        department: str,
        team: str,
        hours: Mapping[str, Optional[str]],
    ) -> int:
        """`hours` is keyed by WEEKDAY_FIELDS names."""

        raise NotImplementedError
