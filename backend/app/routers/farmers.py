"""Farmer API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.core.auth import CallerContext, require_permission
from app.core.database import get_db
from app.models.farmer import Farmer
from app.repositories.farmer_product_repository import FarmerProductRepository
from app.repositories.farmer_repository import FarmerRepository
from app.schemas.farmer import FarmerCreate, FarmerResponse, FarmerUpdate
from app.schemas.settlement import FarmerSettlementSummaryResponse
from app.services.audit_service import AuditService
from app.services.settlement_aggregator import summarize_farmer

router = APIRouter()

_AUDITED_FIELDS = (
    "name",
    "phone",
    "email",
    "branch_id",
    "bank_name",
    "account_number",
    "is_active",
)


def _audit_data(farmer: Farmer) -> dict[str, object]:
    return {key: getattr(farmer, key) for key in _AUDITED_FIELDS}


def get_visible_farmer(farmer_id: UUID, db: Session, caller: CallerContext) -> Farmer:
    """Look up a farmer, raising 404 if missing and 403 if out of scope."""
    farmer = FarmerRepository(db).get_by_id(farmer_id)
    if not farmer:
        raise HTTPException(status_code=404, detail="Farmer not found")
    if not caller.can_view_farmer(farmer_id, farmer.branch_id):  # type: ignore[arg-type]
        raise HTTPException(status_code=403, detail="Farmer is outside your scope")
    return farmer


@router.get(
    "/",
    response_model=list[FarmerResponse],
    summary="List farmers",
    responses={
        401: {"description": "Unauthorized – invalid or missing access token"},
        403: {"description": "Role cannot view farmers"},
    },
)
async def list_farmers(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    search: str | None = Query(default=None, description="Match on name or phone"),
    branch_id: UUID | None = None,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(require_permission("farmers", "view")),
) -> list[Farmer]:
    """List farmers in the caller's branches, optionally searched by name or phone."""
    repo = FarmerRepository(db)
    if caller.is_farmer:
        farmer = repo.get_by_id(caller.farmer_id)  # type: ignore[arg-type]
        farmers = [farmer] if farmer else []
        response.headers["X-Total-Count"] = str(len(farmers))
        return farmers

    scope = caller.branch_filter
    response.headers["X-Total-Count"] = str(repo.count(scope, search, branch_id))
    return repo.get_all(scope, search, branch_id, skip=skip, limit=limit)


@router.get(
    "/{farmer_id}",
    response_model=FarmerResponse,
    summary="Get farmer",
    responses={
        401: {"description": "Unauthorized – invalid or missing access token"},
        403: {"description": "Farmer is outside the caller's scope"},
        404: {"description": "Farmer not found"},
    },
)
async def get_farmer(
    farmer_id: UUID,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(require_permission("farmers", "view")),
) -> Farmer:
    """Get a farmer by ID."""
    return get_visible_farmer(farmer_id, db, caller)


@router.get(
    "/{farmer_id}/payment_summary",
    response_model=FarmerSettlementSummaryResponse,
    summary="Get farmer payment summary",
    responses={
        401: {"description": "Unauthorized – invalid or missing access token"},
        403: {"description": "Farmer is outside the caller's scope"},
        404: {"description": "Farmer not found"},
    },
)
async def get_payment_summary(
    farmer_id: UUID,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(require_permission("farmers", "view")),
) -> FarmerSettlementSummaryResponse:
    """Total, settled and outstanding amounts for one farmer."""
    farmer = get_visible_farmer(farmer_id, db, caller)
    products = FarmerProductRepository(db).get_all(farmer_id=farmer_id, limit=None)
    return FarmerSettlementSummaryResponse.model_validate(summarize_farmer(farmer, products))


@router.post(
    "/",
    response_model=FarmerResponse,
    status_code=201,
    summary="Create farmer",
    responses={
        401: {"description": "Unauthorized – invalid or missing access token"},
        403: {"description": "Role cannot create farmers or branch is out of scope"},
        422: {"description": "Validation error"},
    },
)
async def create_farmer(
    data: FarmerCreate,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(require_permission("farmers", "create")),
) -> Farmer:
    """Register a new farmer."""
    if not caller.can_access_branch(data.branch_id):
        raise HTTPException(status_code=403, detail="Branch is outside your scope")
    farmer = FarmerRepository(db).create(data)
    AuditService(db).log_create(
        resource_type="farmer",
        resource_id=farmer.id,  # type: ignore[arg-type]
        caller=caller,
        branch_id=farmer.branch_id,  # type: ignore[arg-type]
        data=_audit_data(farmer),
    )
    return farmer


@router.put(
    "/{farmer_id}",
    response_model=FarmerResponse,
    summary="Update farmer",
    responses={
        401: {"description": "Unauthorized – invalid or missing access token"},
        403: {"description": "Farmer or target branch is outside the caller's scope"},
        404: {"description": "Farmer not found"},
        422: {"description": "Validation error"},
    },
)
async def update_farmer(
    farmer_id: UUID,
    data: FarmerUpdate,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(require_permission("farmers", "edit")),
) -> Farmer:
    """Update a farmer's details."""
    farmer = get_visible_farmer(farmer_id, db, caller)
    if "branch_id" in data.model_fields_set and not caller.can_access_branch(data.branch_id):
        raise HTTPException(status_code=403, detail="Branch is outside your scope")
    before = _audit_data(farmer)
    updated = FarmerRepository(db).update(farmer_id, data)
    if not updated:
        raise HTTPException(status_code=404, detail="Farmer not found")
    AuditService(db).log_update(
        resource_type="farmer",
        resource_id=farmer_id,
        caller=caller,
        branch_id=updated.branch_id,  # type: ignore[arg-type]
        old_data=before,
        new_data=_audit_data(updated),
    )
    return updated


@router.delete(
    "/{farmer_id}",
    status_code=204,
    summary="Delete farmer",
    responses={
        400: {"description": "Farmer still has recorded products"},
        401: {"description": "Unauthorized – invalid or missing access token"},
        403: {"description": "Farmer is outside the caller's scope"},
        404: {"description": "Farmer not found"},
    },
)
async def delete_farmer(
    farmer_id: UUID,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(require_permission("farmers", "delete")),
) -> None:
    """Delete a farmer with no recorded products."""
    farmer = get_visible_farmer(farmer_id, db, caller)
    if FarmerProductRepository(db).count(farmer_id=farmer_id):
        raise HTTPException(
            status_code=400, detail="Farmer has recorded products and cannot be deleted"
        )
    branch_id = farmer.branch_id
    data = _audit_data(farmer)
    FarmerRepository(db).delete(farmer_id)
    AuditService(db).log_delete(
        resource_type="farmer",
        resource_id=farmer_id,
        caller=caller,
        branch_id=branch_id,  # type: ignore[arg-type]
        data=data,
    )
