from __future__ import annotations

import logging
from typing import Any, Optional

from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AuditAction
from .model import AuditLog
from .repository import AuditLogRepository

logger = logging.getLogger(__name__)


class AuditService:
    """Best-effort audit trail: a failed write is logged and never reaches the caller."""

    def __init__(self, logs: AuditLogRepository):
        self._logs = logs

    def record(
        self,
        action: AuditAction,
        *,
        resource: str,
        actor_id: Optional[int] = None,
        resource_id: Optional[Any] = None,
        details: Optional[dict[str, Any]] = None,
        success: bool = True,
        error_message: Optional[str] = None,
    ) -> None:
        try:
            self._logs.create(
                actor_id=actor_id,
                action=action.value,
                resource=resource,
                resource_id=str(resource_id) if resource_id is not None else None,
                details=details or {},
                success=success,
                error_message=error_message,
            )
        except Exception:
            logger.exception("Failed to write audit log (action=%s resource=%s)", action.value, resource)

    def list_recent(self, *, limit: int = DEFAULT_HISTORY_LIMIT, action: Optional[str] = None) -> list[AuditLog]:
        return list(self._logs.list_recent(limit=int(limit), action=action))
