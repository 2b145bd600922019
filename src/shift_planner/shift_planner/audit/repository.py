from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from .model import AuditLog


class AuditLogRepository(Protocol):
    def create(
        self,
        *,
        actor_id: Optional[int],
        action: str,
        resource: str,
        resource_id: Optional[str],
        details: dict[str, Any],
        success: bool,
        error_message: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def list_recent(self, *, limit: int = 200, action: Optional[str] = None) -> Sequence[AuditLog]:
        raise NotImplementedError
