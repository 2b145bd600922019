from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import iso_or_none
from ..schedules.model import Segment
from ..timeline.colors import status_color


@dataclass(frozen=True)
class Preset:
    """Named template of one or more segments added to a day in one action.

    The representative segment decides the display colour; an out-of-range index falls back to 0.
    """

    preset_id: str
    name: str
    display_name: str
    category: str
    segments: tuple[Segment, ...]
    representative_index: int = 0
    description: str = ""
    is_temporary: bool = False
    created_at: Optional[datetime] = field(default=None, compare=False)

    @property
    def representative(self) -> Segment:
        idx = self.representative_index
        if not 0 <= idx < len(self.segments):
            idx = 0
        return self.segments[idx]

    @property
    def representative_color(self) -> str:
        return status_color(self.representative.status)

    def to_dict(self) -> dict:
        return {
            "id": self.preset_id,
            "name": self.name,
            "displayName": self.display_name,
            "description": self.description,
            "category": self.category,
            "schedules": [s.to_dict() for s in self.segments],
            "representativeScheduleIndex": self.representative_index,
            "representativeColor": self.representative_color,
            "isTemporary": self.is_temporary,
            "createdAt": iso_or_none(self.created_at),
        }
