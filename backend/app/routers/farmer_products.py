"""Farmer product (line item) API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.core.auth import CallerContext, require_permission
from app.core.database import get_db
from app.models.farmer_product import FarmerProduct, PaymentStatus
from app.models.settlement import Settlement
from app.repositories.farmer_product_repository import FarmerProductRepository
from app.routers.farmers import get_visible_farmer
from app.routers.settlements import settlement_http_error
from app.schemas.farmer_product import (
    FarmerProductCreate,
    FarmerProductResponse,
    FarmerProductUpdate,
)
from app.schemas.settlement import SettlementResponse, SingleProductSettle
from app.services.farmer_product_service import FarmerProductService
from app.services.settlement_service import (
    SettlementPersistenceError,
    SettlementService,
    SettlementValidationError,
)

router = APIRouter()


def _get_visible_product(product_id: UUID, db: Session, caller: CallerContext) -> FarmerProduct:
    product = FarmerProductRepository(db).get_by_id(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    get_visible_farmer(product.farmer_id, db, caller)  # type: ignore[arg-type]
    return product


@router.get(
    "/",
    response_model=list[FarmerProductResponse],
    summary="List farmer products",
    responses={
        401: {"description": "Unauthorized – invalid or missing access token"},
        403: {"description": "Farmer is outside the caller's scope"},
        404: {"description": "Farmer not found"},
    },
)
async def list_farmer_products(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    farmer_id: UUID | None = None,
    payment_status: PaymentStatus | None = None,
    order_by: str | None = Query(default=None, description="field:asc or field:desc"),
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(require_permission("products", "view")),
) -> list[FarmerProduct]:
    """List line items, optionally for one farmer and one payment status."""
    if caller.is_farmer:
        farmer_id = caller.farmer_id
    if farmer_id is not None:
        get_visible_farmer(farmer_id, db, caller)
        scope = None
    else:
        scope = caller.branch_filter

    repo = FarmerProductRepository(db)
    response.headers["X-Total-Count"] = str(repo.count(farmer_id, payment_status, scope))
    return repo.get_all(
        farmer_id, payment_status, scope, skip=skip, limit=limit, order_by=order_by
    )


@router.get(
    "/{product_id}",
    response_model=FarmerProductResponse,
    summary="Get farmer product",
    responses={
        401: {"description": "Unauthorized – invalid or missing access token"},
        403: {"description": "Farmer is outside the caller's scope"},
        404: {"description": "Product not found"},
    },
)
async def get_farmer_product(
    product_id: UUID,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(require_permission("products", "view")),
) -> FarmerProduct:
    """Get a line item by ID."""
    return _get_visible_product(product_id, db, caller)


@router.post(
    "/",
    response_model=FarmerProductResponse,
    status_code=201,
    summary="Record farmer product",
    responses={
        401: {"description": "Unauthorized – invalid or missing access token"},
        403: {"description": "Farmer is outside the caller's scope"},
        404: {"description": "Farmer not found"},
        422: {"description": "Validation error"},
    },
)
async def create_farmer_product(
    data: FarmerProductCreate,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(require_permission("products", "create")),
) -> FarmerProduct:
    """Record a delivery owed to a farmer. New items start unsettled."""
    get_visible_farmer(data.farmer_id, db, caller)
    try:
        return FarmerProductService(db).create(data, caller)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None


@router.put(
    "/{product_id}",
    response_model=FarmerProductResponse,
    summary="Update farmer product",
    responses={
        400: {"description": "Product is already settled"},
        401: {"description": "Unauthorized – invalid or missing access token"},
        403: {"description": "Farmer is outside the caller's scope"},
        404: {"description": "Product not found"},
        422: {"description": "Validation error"},
    },
)
async def update_farmer_product(
    product_id: UUID,
    data: FarmerProductUpdate,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(require_permission("products", "edit")),
) -> FarmerProduct:
    """Correct an unsettled line item."""
    product = _get_visible_product(product_id, db, caller)
    try:
        return FarmerProductService(db).update(product, data, caller)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None


@router.delete(
    "/{product_id}",
    status_code=204,
    summary="Delete farmer product",
    responses={
        400: {"description": "Product is already settled"},
        401: {"description": "Unauthorized – invalid or missing access token"},
        403: {"description": "Farmer is outside the caller's scope"},
        404: {"description": "Product not found"},
    },
)
async def delete_farmer_product(
    product_id: UUID,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(require_permission("products", "delete")),
) -> None:
    """Delete an unsettled line item."""
    product = _get_visible_product(product_id, db, caller)
    try:
        FarmerProductService(db).delete(product, caller)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None


@router.post(
    "/{product_id}/settle",
    response_model=SettlementResponse,
    status_code=201,
    summary="Settle a single farmer product",
    responses={
        400: {"description": "Missing transaction proof or product already settled"},
        401: {"description": "Unauthorized – invalid or missing access token"},
        403: {"description": "Farmer is outside the caller's scope"},
        404: {"description": "Product not found"},
        500: {"description": "Settlement could not be recorded; nothing was settled"},
    },
)
async def settle_farmer_product(
    product_id: UUID,
    data: SingleProductSettle,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(require_permission("settlements", "create")),
) -> Settlement:
    """Settle one line item with its own proof of payment."""
    _get_visible_product(product_id, db, caller)
    try:
        return SettlementService(db).settle_product(
            product_id,
            data.transaction_image,
            settlement_method=data.settlement_method,
            notes=data.notes,
            caller=caller,
        )
    except (SettlementValidationError, SettlementPersistenceError) as e:
        raise settlement_http_error(e) from None
