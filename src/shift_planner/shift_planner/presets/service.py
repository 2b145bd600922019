from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from typing import Callable, Iterable, Optional

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.constants import TEMPORARY_PRESET_TTL
from ..core.exceptions import NotFoundError, ValidationError
from ..pending.service import normalize_segments
from ..schedules.model import ScheduleEntry, Segment
from ..schedules.service import ScheduleService
from .catalog import DEFAULT_PRESETS
from .duplicate_filter import filter_duplicates
from .model import Preset
from .store import KeyValueStore, StoredValue

logger = logging.getLogger(__name__)

TEMPORARY_PREFIX = "temp-"


def _preset_from_stored(item: StoredValue) -> Preset:
    v = item.value
    return Preset(
        preset_id=item.key,
        name=item.key,
        display_name=v.get("displayName") or item.key,
        category=v.get("category") or "special",
        segments=tuple(Segment.from_dict(s) for s in v.get("schedules") or []),
        representative_index=int(v.get("representativeScheduleIndex") or 0),
        is_temporary=True,
        created_at=item.created_at,
    )


class PresetService:
    """Use case: preset catalog, planner-created temporary presets and applying a preset to a day."""

    def __init__(
        self,
        store: KeyValueStore,
        schedules: ScheduleService,
        *,
        clock: Callable[[], datetime] = now_local,
        catalog: Iterable[Preset] = DEFAULT_PRESETS,
    ):
        self._store = store
        self._schedules = schedules
        self._clock = clock
        self._catalog = tuple(catalog)

    def list_catalog(self) -> list[Preset]:
        return list(self._catalog)

    def get_preset(self, preset_id: str) -> Preset:
        for p in self._catalog:
            if p.preset_id == preset_id:
                return p
        item = self._store.get(preset_id)
        if item and item.created_at <= self._clock() - TEMPORARY_PRESET_TTL:
            self._store.delete(item.key)
            logger.info("Temporary preset %s expired", item.key)
            item = None
        if item:
            return _preset_from_stored(item)
        raise NotFoundError("プリセットが見つかりません")

    # -------- temporary presets --------
    def collect_expired(self) -> int:
        expired = list(self._store.list_expired(now=self._clock(), ttl=TEMPORARY_PRESET_TTL))
        for key in expired:
            self._store.delete(key)
        if expired:
            logger.info("Removed %d expired temporary presets", len(expired))
        return len(expired)

    def list_temporary(self) -> list[Preset]:
        self.collect_expired()
        return [_preset_from_stored(item) for item in self._store.items()]

    def save_temporary(
        self,
        *,
        display_name: str,
        segments: Iterable[dict],
        representative_index: int = 0,
        category: str = "special",
    ) -> Preset:
        display_name = require_non_empty(display_name, "プリセット名")
        normalized = normalize_segments(segments)
        if not 0 <= int(representative_index) < len(normalized):
            representative_index = 0

        key = f"{TEMPORARY_PREFIX}{uuid.uuid4().hex[:12]}"
        self._store.set(
            key,
            {
                "displayName": display_name,
                "category": category,
                "schedules": [s.to_dict() for s in normalized],
                "representativeScheduleIndex": int(representative_index),
            },
            created_at=self._clock(),
        )
        return self.get_preset(key)

    def delete_temporary(self, key: str) -> None:
        if not key.startswith(TEMPORARY_PREFIX) or not self._store.delete(key):
            raise NotFoundError("プリセットが見つかりません")

    # -------- apply --------
    def apply_to_day(
        self,
        *,
        staff_id: int,
        work_date: date,
        preset_id: Optional[str] = None,
        segments: Optional[Iterable[dict]] = None,
    ) -> dict:
        """Create adjustment entries for the preset segments the day does not already show."""

        if preset_id:
            wanted = list(self.get_preset(preset_id).segments)
        elif segments is not None:
            wanted = normalize_segments(segments)
        else:
            raise ValidationError("プリセットが指定されていません")

        existing: list[ScheduleEntry] = self._schedules.day_entries(staff_id=staff_id, work_date=work_date)
        kept = filter_duplicates(wanted, existing)

        created = [
            self._schedules.create_adjustment(
                staff_id=staff_id,
                work_date=work_date,
                status=seg.status,
                start=seg.start,
                end=seg.end,
                memo=seg.memo,
            )
            for seg in kept
        ]
        skipped = [s for s in wanted if s not in kept]
        logger.info(
            "Preset applied staff=%s date=%s created=%d skipped=%d", staff_id, work_date, len(created), len(skipped)
        )
        return {
            "created": [ScheduleEntry.from_adjustment(a).to_dict() for a in created],
            "skipped": [s.to_dict() for s in skipped],
        }
