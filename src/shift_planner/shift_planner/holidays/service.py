from __future__ import annotations

from datetime import date

from .model import Holiday
from .repository import HolidayRepository


class HolidayService:
    def __init__(self, holidays: HolidayRepository):
        self._holidays = holidays

    def list_for_year(self, year: int) -> list[Holiday]:
        return list(self._holidays.list_between(start=date(int(year), 1, 1), end=date(int(year), 12, 31)))

    def dates_between(self, start: date, end: date) -> set[date]:
        return {h.holiday_date for h in self._holidays.list_between(start=start, end=end)}

    def is_holiday(self, day: date) -> bool:
        return day in self.dates_between(day, day)
