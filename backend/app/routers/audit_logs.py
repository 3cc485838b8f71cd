"""Audit log API endpoints."""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.auth import CallerContext, require_permission
from app.core.database import get_db
from app.repositories.audit_log_repository import AuditLogRepository
from app.schemas.audit_log import AuditLogResponse

router = APIRouter()


@router.get(
    "/",
    response_model=list[AuditLogResponse],
    summary="List audit logs",
    responses={
        401: {"description": "Unauthorized – invalid or missing access token"},
        403: {"description": "Role cannot view audit logs"},
    },
)
async def list_audit_logs(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    resource_type: str | None = None,
    action: str | None = None,
    actor_id: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    order_by: str | None = Query(default=None, description="field:asc or field:desc"),
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(require_permission("audit_logs", "view")),
) -> list[AuditLogResponse]:
    """List audit logs in the caller's branches with optional filters."""
    repo = AuditLogRepository(db)
    return [
        AuditLogResponse.model_validate(log)
        for log in repo.get_all(
            skip=skip,
            limit=limit,
            branch_ids=caller.branch_filter,
            resource_type=resource_type,
            action=action,
            start_date=start_date,
            end_date=end_date,
            actor_id=actor_id,
            order_by=order_by,
        )
    ]


@router.get(
    "/{resource_type}/{resource_id}",
    response_model=list[AuditLogResponse],
    summary="Get audit trail for a resource",
    responses={
        401: {"description": "Unauthorized – invalid or missing access token"},
        403: {"description": "Role cannot view audit logs"},
    },
)
async def get_resource_audit_trail(
    resource_type: str,
    resource_id: UUID,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(require_permission("audit_logs", "view")),
) -> list[AuditLogResponse]:
    """Get the audit trail for a specific resource."""
    repo = AuditLogRepository(db)
    logs = repo.get_by_resource(
        resource_type, resource_id, skip=skip, limit=limit, branch_ids=caller.branch_filter
    )
    return [AuditLogResponse.model_validate(log) for log in logs]
