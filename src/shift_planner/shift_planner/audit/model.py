from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import iso_or_none


@dataclass(frozen=True)
class AuditLog:
    log_id: int
    actor_id: Optional[int]
    action: str
    resource: str
    resource_id: Optional[str]
    success: bool
    created_at: datetime
    details: dict[str, Any] = field(default_factory=dict)
    error_message: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.log_id,
            "actorId": self.actor_id,
            "action": self.action,
            "resource": self.resource,
            "resourceId": self.resource_id,
            "details": self.details,
            "success": self.success,
            "errorMessage": self.error_message,
            "createdAt": iso_or_none(self.created_at),
        }
