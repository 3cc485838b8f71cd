"""Branch API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.auth import CallerContext, require_permission
from app.core.database import get_db
from app.models.branch import Branch
from app.repositories.branch_repository import BranchRepository
from app.schemas.branch import BranchCreate, BranchResponse

router = APIRouter()


@router.get(
    "/",
    response_model=list[BranchResponse],
    summary="List branches",
    responses={
        401: {"description": "Unauthorized – invalid or missing access token"},
        403: {"description": "Role cannot view branches"},
    },
)
async def list_branches(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(require_permission("branches", "view")),
) -> list[Branch]:
    """List the branches the caller is assigned to."""
    repo = BranchRepository(db)
    return repo.get_all(caller.branch_filter, skip=skip, limit=limit)


@router.get(
    "/{branch_id}",
    response_model=BranchResponse,
    summary="Get branch",
    responses={
        401: {"description": "Unauthorized – invalid or missing access token"},
        403: {"description": "Branch is outside the caller's scope"},
        404: {"description": "Branch not found"},
    },
)
async def get_branch(
    branch_id: UUID,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(require_permission("branches", "view")),
) -> Branch:
    """Get a branch by ID."""
    branch = BranchRepository(db).get_by_id(branch_id)
    if not branch:
        raise HTTPException(status_code=404, detail="Branch not found")
    if not caller.can_access_branch(branch_id):
        raise HTTPException(status_code=403, detail="Branch is outside your scope")
    return branch


@router.post(
    "/",
    response_model=BranchResponse,
    status_code=201,
    summary="Create branch",
    responses={
        401: {"description": "Unauthorized – invalid or missing access token"},
        403: {"description": "Role cannot create branches"},
        409: {"description": "Branch with this code already exists"},
        422: {"description": "Validation error"},
    },
)
async def create_branch(
    data: BranchCreate,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(require_permission("branches", "create")),
) -> Branch:
    """Create a new branch."""
    repo = BranchRepository(db)
    if repo.get_by_code(data.code):
        raise HTTPException(status_code=409, detail="Branch with this code already exists")
    return repo.create(data)
