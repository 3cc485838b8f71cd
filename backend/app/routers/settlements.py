"""Settlement API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.core.auth import CallerContext, require_permission
from app.core.database import get_db
from app.models.farmer_product import PaymentStatus
from app.models.settlement import Settlement
from app.repositories.farmer_product_repository import FarmerProductRepository
from app.repositories.farmer_repository import FarmerRepository
from app.repositories.settlement_product_repository import SettlementProductRepository
from app.repositories.settlement_repository import SettlementRepository
from app.routers.farmers import get_visible_farmer
from app.schemas.settlement import (
    BatchGroupResponse,
    DailySettlementGroupResponse,
    FarmerSettlementSummaryResponse,
    MonthlySummaryResponse,
    SettlementCandidateResponse,
    SettlementCreate,
    SettlementDetailResponse,
    SettlementPreviewRequest,
    SettlementProductResponse,
    SettlementResponse,
)
from app.services.settlement_aggregator import (
    group_settled_by_batch_key,
    summarize_farmers,
)
from app.services.settlement_presenter import group_by_calendar_date, group_by_month
from app.services.settlement_service import (
    SettlementPersistenceError,
    SettlementService,
    SettlementValidationError,
)

router = APIRouter()


def settlement_http_error(
    error: SettlementValidationError | SettlementPersistenceError,
) -> HTTPException:
    """Translate a settlement failure into the HTTP error reported to the caller."""
    if isinstance(error, SettlementPersistenceError):
        return HTTPException(
            status_code=500,
            detail={
                "message": error.message,
                "failed_product_ids": [str(pid) for pid in error.failed_product_ids],
                "settled_product_ids": [str(pid) for pid in error.settled_product_ids],
            },
        )
    return HTTPException(status_code=400, detail=str(error))


@router.get(
    "/",
    response_model=list[SettlementResponse],
    summary="List settlements",
    responses={
        401: {"description": "Unauthorized – invalid or missing access token"},
        403: {"description": "Farmer is outside the caller's scope"},
        404: {"description": "Farmer not found"},
    },
)
async def list_settlements(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    farmer_id: UUID | None = None,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(require_permission("settlements", "view")),
) -> list[Settlement]:
    """List settlements, newest first."""
    if caller.is_farmer:
        farmer_id = caller.farmer_id
    if farmer_id is not None:
        get_visible_farmer(farmer_id, db, caller)
        scope = None
    else:
        scope = caller.branch_filter

    repo = SettlementRepository(db)
    response.headers["X-Total-Count"] = str(repo.count(farmer_id, scope))
    return repo.get_all(farmer_id, scope, skip=skip, limit=limit)


@router.get(
    "/summaries",
    response_model=list[FarmerSettlementSummaryResponse],
    summary="Per-farmer settlement summaries",
    responses={
        401: {"description": "Unauthorized – invalid or missing access token"},
        403: {"description": "Role cannot view settlements"},
    },
)
async def list_settlement_summaries(
    search: str | None = Query(default=None, description="Match on farmer name or phone"),
    branch_id: UUID | None = None,
    outstanding_only: bool = Query(default=False, description="Only farmers still owed"),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(require_permission("settlements", "view")),
) -> list[FarmerSettlementSummaryResponse]:
    """Total, settled and outstanding amounts per farmer, largest balance first."""
    farmer_repo = FarmerRepository(db)
    product_repo = FarmerProductRepository(db)
    if caller.is_farmer:
        farmer = farmer_repo.get_by_id(caller.farmer_id)  # type: ignore[arg-type]
        farmers = [farmer] if farmer else []
        products = product_repo.get_all(farmer_id=caller.farmer_id, limit=None)
    else:
        scope = caller.branch_filter
        farmers = farmer_repo.get_all(scope, search, branch_id, skip=skip, limit=limit)
        products = product_repo.get_all(branch_ids=scope, limit=None)

    summaries = summarize_farmers(farmers, products)
    if outstanding_only:
        summaries = [s for s in summaries if s.unsettled_amount > 0]
    return [FarmerSettlementSummaryResponse.model_validate(s) for s in summaries]


@router.post(
    "/preview",
    response_model=SettlementCandidateResponse,
    summary="Preview a settlement",
    responses={
        400: {"description": "Invalid selection"},
        401: {"description": "Unauthorized – invalid or missing access token"},
        403: {"description": "Farmer is outside the caller's scope"},
        404: {"description": "Farmer not found"},
    },
)
async def preview_settlement(
    data: SettlementPreviewRequest,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(require_permission("settlements", "create")),
) -> SettlementCandidateResponse:
    """Show what settling the selection would pay, without writing anything."""
    get_visible_farmer(data.farmer_id, db, caller)
    try:
        candidate = SettlementService(db).preview(data.farmer_id, data.product_ids)
    except SettlementValidationError as e:
        raise settlement_http_error(e) from None
    return SettlementCandidateResponse.model_validate(candidate)


@router.post(
    "/",
    response_model=SettlementResponse,
    status_code=201,
    summary="Settle farmer products",
    responses={
        400: {"description": "Missing transaction proof or invalid selection"},
        401: {"description": "Unauthorized – invalid or missing access token"},
        403: {"description": "Farmer is outside the caller's scope"},
        404: {"description": "Farmer not found"},
        500: {"description": "Settlement could not be recorded; nothing was settled"},
    },
)
async def create_settlement(
    data: SettlementCreate,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(require_permission("settlements", "create")),
) -> Settlement:
    """Settle the selected products, or every unsettled product when none are given."""
    get_visible_farmer(data.farmer_id, db, caller)
    service = SettlementService(db)
    try:
        if data.product_ids is None:
            return service.settle_all_unsettled(
                data.farmer_id,
                data.transaction_image,
                settlement_method=data.settlement_method,
                notes=data.notes,
                caller=caller,
            )
        return service.settle(
            data.farmer_id,
            data.product_ids,
            data.transaction_image,
            settlement_method=data.settlement_method,
            notes=data.notes,
            caller=caller,
        )
    except (SettlementValidationError, SettlementPersistenceError) as e:
        raise settlement_http_error(e) from None


@router.get(
    "/farmers/{farmer_id}/daily",
    response_model=list[DailySettlementGroupResponse],
    summary="Settled products grouped by day",
    responses={
        401: {"description": "Unauthorized – invalid or missing access token"},
        403: {"description": "Farmer is outside the caller's scope"},
        404: {"description": "Farmer not found"},
    },
)
async def get_daily_history(
    farmer_id: UUID,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(require_permission("settlements", "view")),
) -> list[DailySettlementGroupResponse]:
    """Settlement history for a farmer, one group per day, newest first."""
    get_visible_farmer(farmer_id, db, caller)
    settled = FarmerProductRepository(db).get_all(
        farmer_id=farmer_id, payment_status=PaymentStatus.SETTLED, limit=None
    )
    return [DailySettlementGroupResponse.model_validate(g) for g in group_by_calendar_date(settled)]


@router.get(
    "/farmers/{farmer_id}/monthly",
    response_model=list[MonthlySummaryResponse],
    summary="Monthly product summary",
    responses={
        401: {"description": "Unauthorized – invalid or missing access token"},
        403: {"description": "Farmer is outside the caller's scope"},
        404: {"description": "Farmer not found"},
    },
)
async def get_monthly_summary(
    farmer_id: UUID,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(require_permission("settlements", "view")),
) -> list[MonthlySummaryResponse]:
    """Products per month, merged by name and payment status."""
    get_visible_farmer(farmer_id, db, caller)
    products = FarmerProductRepository(db).get_all(farmer_id=farmer_id, limit=None)
    return [MonthlySummaryResponse.model_validate(m) for m in group_by_month(products)]


@router.get(
    "/farmers/{farmer_id}/batches",
    response_model=list[BatchGroupResponse],
    summary="Settled products grouped by payout batch",
    responses={
        401: {"description": "Unauthorized – invalid or missing access token"},
        403: {"description": "Farmer is outside the caller's scope"},
        404: {"description": "Farmer not found"},
    },
)
async def get_batches(
    farmer_id: UUID,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(require_permission("settlements", "view")),
) -> list[BatchGroupResponse]:
    """Settled products grouped by the settlement or proof they were paid with."""
    get_visible_farmer(farmer_id, db, caller)
    settled = FarmerProductRepository(db).get_all(
        farmer_id=farmer_id,
        payment_status=PaymentStatus.SETTLED,
        limit=None,
        order_by="updated_at:desc,name:asc",
    )
    return [BatchGroupResponse.model_validate(g) for g in group_settled_by_batch_key(settled)]


@router.get(
    "/{settlement_id}",
    response_model=SettlementDetailResponse,
    summary="Get settlement",
    responses={
        401: {"description": "Unauthorized – invalid or missing access token"},
        403: {"description": "Farmer is outside the caller's scope"},
        404: {"description": "Settlement not found"},
    },
)
async def get_settlement(
    settlement_id: UUID,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(require_permission("settlements", "view")),
) -> SettlementDetailResponse:
    """Get a settlement with the product snapshots it paid for."""
    settlement = SettlementRepository(db).get_by_id(settlement_id)
    if not settlement:
        raise HTTPException(status_code=404, detail="Settlement not found")
    get_visible_farmer(settlement.farmer_id, db, caller)  # type: ignore[arg-type]

    detail = SettlementDetailResponse.model_validate(settlement)
    detail.products = [
        SettlementProductResponse.model_validate(snapshot)
        for snapshot in SettlementProductRepository(db).get_by_settlement_id(settlement_id)
    ]
    return detail
