"""Built-in preset catalog."""

from __future__ import annotations

from ..schedules.model import Segment
from .model import Preset

PRESET_CATEGORIES = {
    "general": "一般勤務",
    "time-off": "休暇・休み",
    "night-duty": "夜間担当",
    "special": "その他",
}

DEFAULT_PRESETS: tuple[Preset, ...] = (
    Preset(
        preset_id="early-shift",
        name="earlyShift",
        display_name="通常勤務（出向社員）",
        description="9:00-18:00の標準的な勤務時間",
        category="general",
        segments=(
            Segment("出社", 9, 12),
            Segment("break", 12, 13),
            Segment("online", 13, 18),
        ),
    ),
    Preset(
        preset_id="part-time",
        name="partTime",
        display_name="通常勤務（パートタイマー）",
        description="9:00-17:45のパートタイム勤務",
        category="general",
        segments=(
            Segment("出社", 9, 12),
            Segment("break", 12, 13),
            Segment("online", 13, 17.75),
        ),
    ),
    Preset(
        preset_id="remote-work",
        name="remoteWork",
        display_name="在宅勤務（出向社員）",
        description="9:00-18:00の在宅勤務",
        category="general",
        segments=(
            Segment("remote", 9, 12),
            Segment("break", 12, 13),
            Segment("remote", 13, 18),
        ),
    ),
    Preset(
        preset_id="paid-leave",
        name="paidLeave",
        display_name="休暇",
        description="有給休暇・年次休暇",
        category="time-off",
        segments=(Segment("off", 9, 18),),
    ),
    Preset(
        preset_id="morning-off",
        name="morningOff",
        display_name="午前休",
        description="午前中の半日休暇",
        category="time-off",
        segments=(Segment("off", 9, 14),),
    ),
    Preset(
        preset_id="afternoon-off",
        name="afternoonOff",
        display_name="午後休",
        description="午後の半日休暇",
        category="time-off",
        segments=(Segment("off", 13, 18),),
    ),
    Preset(
        preset_id="night-duty",
        name="nightDuty",
        display_name="夜間担当",
        description="夜間担当業務",
        category="night-duty",
        segments=(
            Segment("off", 9, 12),
            Segment("online", 12, 13),
            Segment("break", 17, 18),
            Segment("night duty", 18, 21),
        ),
        representative_index=3,
    ),
    Preset(
        preset_id="training",
        name="training",
        display_name="研修",
        category="special",
        segments=(Segment("training", 9, 18),),
    ),
    Preset(
        preset_id="meeting",
        name="meeting",
        display_name="会議",
        category="special",
        segments=(Segment("meeting", 10, 12),),
    ),
)
