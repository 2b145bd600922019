from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import ImportBatch, ImportKind


class ImportBatchRepository(Protocol):
    def create(self, *, batch_id: str, kind: ImportKind, created_by: Optional[int], created_at: datetime) -> None:
        raise NotImplementedError

    def set_row_count(self, batch_id: str, row_count: int) -> None:
        raise NotImplementedError

    def get(self, batch_id: str) -> Optional[ImportBatch]:
        raise NotImplementedError

    def list_recent(self, *, limit: int = 200) -> Sequence[ImportBatch]:
        raise NotImplementedError

    def mark_rolled_back(self, batch_id: str, *, at: datetime) -> bool:
        """False when the batch was already rolled back."""

        raise NotImplementedError
