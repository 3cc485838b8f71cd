"""Repository for AuditLog CRUD operations."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.sorting import apply_order_by
from app.models.audit_log import AuditLog


class AuditLogRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        *,
        resource_type: str,
        resource_id: UUID,
        action: str,
        changes: dict[str, Any],
        actor_type: str,
        actor_id: str | None = None,
        branch_id: UUID | None = None,
        metadata: dict[str, Any] | None = None,
        commit: bool = True,
    ) -> AuditLog:
        """Record an audit entry.

        With ``commit=False`` the entry is only flushed so it joins the
        caller's transaction.
        """
        audit_log = AuditLog(
            branch_id=branch_id,
            resource_type=resource_type,
            resource_id=resource_id,
            action=action,
            changes=changes,
            actor_type=actor_type,
            actor_id=actor_id,
            metadata_=metadata,
        )
        self.db.add(audit_log)
        if commit:
            self.db.commit()
            self.db.refresh(audit_log)
        else:
            self.db.flush()
        return audit_log

    def get_by_resource(
        self,
        resource_type: str,
        resource_id: UUID,
        skip: int = 0,
        limit: int = 100,
        branch_ids: list[UUID] | None = None,
    ) -> list[AuditLog]:
        query = self.db.query(AuditLog).filter(
            AuditLog.resource_type == resource_type,
            AuditLog.resource_id == resource_id,
        )
        if branch_ids is not None:
            query = query.filter(AuditLog.branch_id.in_(branch_ids))
        return query.order_by(AuditLog.created_at.desc()).offset(skip).limit(limit).all()

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        branch_ids: list[UUID] | None = None,
        resource_type: str | None = None,
        action: str | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        actor_id: str | None = None,
        order_by: str | None = None,
    ) -> list[AuditLog]:
        query = self.db.query(AuditLog)
        if branch_ids is not None:
            query = query.filter(AuditLog.branch_id.in_(branch_ids))
        if resource_type is not None:
            query = query.filter(AuditLog.resource_type == resource_type)
        if action is not None:
            query = query.filter(AuditLog.action == action)
        if start_date is not None:
            query = query.filter(AuditLog.created_at >= start_date)
        if end_date is not None:
            query = query.filter(AuditLog.created_at <= end_date)
        if actor_id is not None:
            query = query.filter(AuditLog.actor_id == actor_id)
        query = apply_order_by(query, AuditLog, order_by)
        return query.offset(skip).limit(limit).all()
