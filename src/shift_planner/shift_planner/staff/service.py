from __future__ import annotations

from typing import Optional

from ..contracts.repository import ContractRepository
from ..core.exceptions import NotFoundError
from .model import Staff
from .repository import StaffRepository


class StaffService:
    """Use case: read the staff roster."""

    def __init__(self, staff: StaffRepository, contracts: ContractRepository):
        self._staff = staff
        self._contracts = contracts

    def list_active(self) -> list[Staff]:
        return list(self._staff.list_active())

    def get(self, staff_id: int) -> Staff:
        staff = self._staff.get_by_id(int(staff_id))
        if not staff:
            raise NotFoundError("スタッフが見つかりません")
        return staff

    def detail(self, staff_id: int) -> dict:
        staff = self.get(staff_id)
        contract = self._contracts.get_for_staff(staff.staff_id)
        data = staff.to_dict()
        data["contract"] = contract.to_dict() if contract else None
        return data

    def find_by_emp_no(self, emp_no: str) -> Optional[Staff]:
        return self._staff.get_by_emp_no(str(emp_no))
