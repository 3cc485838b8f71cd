"""Corrections to farmer line items before they are paid."""

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.auth import CallerContext
from app.models.farmer_product import FarmerProduct
from app.repositories.farmer_product_repository import FarmerProductRepository
from app.repositories.farmer_repository import FarmerRepository
from app.schemas.farmer_product import FarmerProductCreate, FarmerProductUpdate
from app.services.audit_service import AuditService
from app.services.settlement_aggregator import is_settled

logger = logging.getLogger(__name__)

_AUDITED_FIELDS = ("name", "category", "quantity", "unit", "price_per_unit", "is_active")


def _snapshot(product: FarmerProduct) -> dict[str, object]:
    return {key: getattr(product, key) for key in _AUDITED_FIELDS}


class FarmerProductService:
    """Create, correct and remove line items.

    A settled line item is part of a payout record and cannot be changed.
    """

    def __init__(self, db: Session):
        self.repo = FarmerProductRepository(db)
        self.farmer_repo = FarmerRepository(db)
        self.audit_service = AuditService(db)

    def create(
        self, data: FarmerProductCreate, caller: CallerContext | None = None
    ) -> FarmerProduct:
        farmer = self.farmer_repo.get_by_id(data.farmer_id)
        if not farmer:
            raise ValueError(f"Farmer {data.farmer_id} not found")
        product = self.repo.create(data)
        self.audit_service.log_create(
            resource_type="farmer_product",
            resource_id=product.id,  # type: ignore[arg-type]
            caller=caller,
            branch_id=farmer.branch_id,  # type: ignore[arg-type]
            data=_snapshot(product),
        )
        return product

    def update(
        self, product: FarmerProduct, data: FarmerProductUpdate, caller: CallerContext | None = None
    ) -> FarmerProduct:
        """Apply a correction to an unsettled line item.

        Raises:
            ValueError: If the item has already been settled.
        """
        if is_settled(product):
            raise ValueError(f"Product {product.name} is already settled and cannot be edited")
        before = _snapshot(product)
        updated = self.repo.update(product.id, data)  # type: ignore[arg-type]
        if updated is None:
            raise ValueError(f"Product {product.id} not found")
        farmer = self.farmer_repo.get_by_id(updated.farmer_id)  # type: ignore[arg-type]
        self.audit_service.log_update(
            resource_type="farmer_product",
            resource_id=updated.id,  # type: ignore[arg-type]
            caller=caller,
            branch_id=farmer.branch_id if farmer else None,  # type: ignore[arg-type]
            old_data=before,
            new_data=_snapshot(updated),
        )
        return updated

    def delete(self, product: FarmerProduct, caller: CallerContext | None = None) -> None:
        """Remove an unsettled line item.

        Raises:
            ValueError: If the item has already been settled.
        """
        if is_settled(product):
            raise ValueError(f"Product {product.name} is already settled and cannot be deleted")
        product_id = UUID(str(product.id))
        farmer = self.farmer_repo.get_by_id(product.farmer_id)  # type: ignore[arg-type]
        data = _snapshot(product)
        self.repo.delete(product_id)
        self.audit_service.log_delete(
            resource_type="farmer_product",
            resource_id=product_id,
            caller=caller,
            branch_id=farmer.branch_id if farmer else None,  # type: ignore[arg-type]
            data=data,
        )
        logger.info("Deleted unsettled product %s", product_id)
