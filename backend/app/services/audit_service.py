"""Audit service for recording state changes to farmers, products and settlements."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.auth import CallerContext
from app.repositories.audit_log_repository import AuditLogRepository


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (Decimal, UUID)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _clean(data: dict[str, Any] | None) -> dict[str, Any]:
    return {key: _jsonable(value) for key, value in (data or {}).items()}


def _actor(caller: CallerContext | None) -> tuple[str, str | None]:
    if caller is None:
        return "system", None
    return caller.role, caller.user_id


class AuditService:
    """Service for recording audit trail entries."""

    def __init__(self, db: Session):
        self.repo = AuditLogRepository(db)

    def log_create(
        self,
        resource_type: str,
        resource_id: UUID,
        caller: CallerContext | None = None,
        branch_id: UUID | None = None,
        data: dict[str, Any] | None = None,
        commit: bool = True,
    ) -> None:
        """Log a resource creation event."""
        actor_type, actor_id = _actor(caller)
        self.repo.create(
            branch_id=branch_id,
            resource_type=resource_type,
            resource_id=resource_id,
            action="created",
            changes=_clean(data),
            actor_type=actor_type,
            actor_id=actor_id,
            commit=commit,
        )

    def log_update(
        self,
        resource_type: str,
        resource_id: UUID,
        caller: CallerContext | None = None,
        branch_id: UUID | None = None,
        old_data: dict[str, Any] | None = None,
        new_data: dict[str, Any] | None = None,
    ) -> None:
        """Log a resource update event, auto-diffing changed fields."""
        old = _clean(old_data)
        new = _clean(new_data)
        changes: dict[str, Any] = {}
        for key in set(old.keys()) | set(new.keys()):
            if old.get(key) != new.get(key):
                changes[key] = {"old": old.get(key), "new": new.get(key)}
        if not changes:
            return
        actor_type, actor_id = _actor(caller)
        self.repo.create(
            branch_id=branch_id,
            resource_type=resource_type,
            resource_id=resource_id,
            action="updated",
            changes=changes,
            actor_type=actor_type,
            actor_id=actor_id,
        )

    def log_delete(
        self,
        resource_type: str,
        resource_id: UUID,
        caller: CallerContext | None = None,
        branch_id: UUID | None = None,
        data: dict[str, Any] | None = None,
    ) -> None:
        actor_type, actor_id = _actor(caller)
        self.repo.create(
            branch_id=branch_id,
            resource_type=resource_type,
            resource_id=resource_id,
            action="deleted",
            changes=_clean(data),
            actor_type=actor_type,
            actor_id=actor_id,
        )

    def log_status_change(
        self,
        resource_type: str,
        resource_id: UUID,
        old_status: str,
        new_status: str,
        caller: CallerContext | None = None,
        branch_id: UUID | None = None,
        metadata: dict[str, Any] | None = None,
        commit: bool = True,
    ) -> None:
        """Log a status change event."""
        actor_type, actor_id = _actor(caller)
        self.repo.create(
            branch_id=branch_id,
            resource_type=resource_type,
            resource_id=resource_id,
            action="status_changed",
            changes={"status": {"old": old_status, "new": new_status}},
            actor_type=actor_type,
            actor_id=actor_id,
            metadata=_clean(metadata) if metadata else None,
            commit=commit,
        )
