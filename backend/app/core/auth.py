from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, Request

from app.core.config import settings
from app.core.permissions import Role, can_access, has_permission


@dataclass(frozen=True)
class CallerContext:
    """Who is calling and which branches or farmer they are scoped to."""

    role: str
    user_id: str
    branch_ids: tuple[UUID, ...] = field(default_factory=tuple)
    farmer_id: UUID | None = None

    @property
    def is_farmer(self) -> bool:
        return self.role == Role.FARMER.value

    @property
    def branch_filter(self) -> list[UUID] | None:
        """Branch ids to restrict queries to; None means unrestricted."""
        if self.role == Role.ADMIN.value:
            return None
        return list(self.branch_ids)

    def can_access_branch(self, branch_id: UUID | None) -> bool:
        return can_access(self.role, self.branch_ids, branch_id)

    def can_view_farmer(self, farmer_id: UUID, branch_id: UUID | None) -> bool:
        """Farmers see only themselves; staff see farmers in their branches."""
        if self.is_farmer:
            return self.farmer_id == farmer_id
        return self.can_access_branch(branch_id)


def create_access_token(context: CallerContext, ttl_hours: int | None = None) -> str:
    """Encode a caller context as a signed JWT."""
    hours = ttl_hours if ttl_hours is not None else settings.AUTH_TOKEN_TTL_HOURS
    payload: dict[str, Any] = {
        "sub": context.user_id,
        "role": context.role,
        "branch_ids": [str(b) for b in context.branch_ids],
        "type": "access",
        "exp": datetime.now(UTC) + timedelta(hours=hours),
    }
    if context.farmer_id is not None:
        payload["farmer_id"] = str(context.farmer_id)
    return jwt.encode(payload, settings.AUTH_JWT_SECRET, algorithm=settings.AUTH_JWT_ALGORITHM)


def decode_access_token(token: str) -> CallerContext:
    """Decode and validate an access token.

    Raises jwt.ExpiredSignatureError or jwt.InvalidTokenError on failure.
    """
    payload = jwt.decode(
        token, settings.AUTH_JWT_SECRET, algorithms=[settings.AUTH_JWT_ALGORITHM]
    )
    if payload.get("type") != "access":
        raise jwt.InvalidTokenError("Invalid token type")

    role = payload["role"]
    if role not in {r.value for r in Role}:
        raise jwt.InvalidTokenError(f"Unknown role: {role}")

    farmer_id = payload.get("farmer_id")
    if role == Role.FARMER.value and not farmer_id:
        raise jwt.InvalidTokenError("Farmer token without farmer_id")

    return CallerContext(
        role=role,
        user_id=str(payload["sub"]),
        branch_ids=tuple(UUID(b) for b in payload.get("branch_ids", [])),
        farmer_id=UUID(farmer_id) if farmer_id else None,
    )


def get_caller_context(request: Request) -> CallerContext:
    """Extract the caller context from the Bearer token in the Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise HTTPException(status_code=401, detail="Authorization header is required")

    if not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization header format")

    token = auth_header[7:]
    if not token:
        raise HTTPException(status_code=401, detail="Access token is required")

    try:
        return decode_access_token(token)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Access token has expired") from None
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid access token") from None


def require_permission(resource: str, action: str) -> Callable[..., CallerContext]:
    """Build a dependency that rejects callers whose role lacks the permission."""

    def dependency(caller: CallerContext = Depends(get_caller_context)) -> CallerContext:
        if not has_permission(caller.role, resource, action):
            raise HTTPException(
                status_code=403,
                detail=f"Role '{caller.role}' cannot {action} {resource}",
            )
        return caller

    return dependency
