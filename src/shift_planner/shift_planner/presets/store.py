from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional, Protocol, Sequence


@dataclass(frozen=True)
class StoredValue:
    key: str
    value: dict[str, Any]
    created_at: datetime


class KeyValueStore(Protocol):
    """Small key-value interface for planner-created (temporary) presets."""

    def get(self, key: str) -> Optional[StoredValue]:
        raise NotImplementedError

    def set(self, key: str, value: dict[str, Any], *, created_at: datetime) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> bool:
        raise NotImplementedError

    def list_expired(self, *, now: datetime, ttl: timedelta) -> Sequence[str]:
        """Keys whose entries were created at or before now - ttl."""

        raise NotImplementedError

    def items(self) -> Sequence[StoredValue]:
        raise NotImplementedError


class InMemoryKeyValueStore(KeyValueStore):
    def __init__(self):
        self._data: dict[str, StoredValue] = {}

    def get(self, key: str) -> Optional[StoredValue]:
        return self._data.get(key)

    def set(self, key: str, value: dict[str, Any], *, created_at: datetime) -> None:
        self._data[key] = StoredValue(key=key, value=dict(value), created_at=created_at)

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def list_expired(self, *, now: datetime, ttl: timedelta) -> Sequence[str]:
        cutoff = now - ttl
        return [k for k, v in self._data.items() if v.created_at <= cutoff]

    def items(self) -> Sequence[StoredValue]:
        return sorted(self._data.values(), key=lambda v: v.created_at)
