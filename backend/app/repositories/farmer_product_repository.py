"""FarmerProduct repository for data access."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy.orm import Query, Session

from app.core.sorting import apply_order_by
from app.models.farmer import Farmer
from app.models.farmer_product import FarmerProduct, PaymentStatus
from app.schemas.farmer_product import FarmerProductCreate, FarmerProductUpdate


class FarmerProductRepository:
    """Repository for FarmerProduct model."""

    def __init__(self, db: Session):
        self.db = db

    def _filtered(
        self,
        farmer_id: UUID | None = None,
        payment_status: PaymentStatus | None = None,
        branch_ids: list[UUID] | None = None,
    ) -> Query:  # type: ignore[type-arg]
        query = self.db.query(FarmerProduct)
        if farmer_id is not None:
            query = query.filter(FarmerProduct.farmer_id == farmer_id)
        if payment_status is not None:
            query = query.filter(FarmerProduct.payment_status == payment_status.value)
        if branch_ids is not None:
            query = query.join(Farmer, Farmer.id == FarmerProduct.farmer_id).filter(
                Farmer.branch_id.in_(branch_ids)
            )
        return query

    def get_all(
        self,
        farmer_id: UUID | None = None,
        payment_status: PaymentStatus | None = None,
        branch_ids: list[UUID] | None = None,
        skip: int = 0,
        limit: int | None = 100,
        order_by: str | None = None,
    ) -> list[FarmerProduct]:
        """Get products with optional filters, ordered by name unless told otherwise."""
        query = self._filtered(farmer_id, payment_status, branch_ids)
        query = apply_order_by(
            query, FarmerProduct, order_by, default_field="name", default_direction="asc"
        )
        query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def count(
        self,
        farmer_id: UUID | None = None,
        payment_status: PaymentStatus | None = None,
        branch_ids: list[UUID] | None = None,
    ) -> int:
        return self._filtered(farmer_id, payment_status, branch_ids).count()

    def get_by_id(self, product_id: UUID) -> FarmerProduct | None:
        return self.db.query(FarmerProduct).filter(FarmerProduct.id == product_id).first()

    def get_by_ids(self, product_ids: list[UUID], for_update: bool = False) -> list[FarmerProduct]:
        """Get products by ID, preserving the order of ``product_ids``.

        Unknown IDs are skipped. With ``for_update`` the rows are locked on
        dialects that support SELECT ... FOR UPDATE.
        """
        if not product_ids:
            return []
        query = self.db.query(FarmerProduct).filter(FarmerProduct.id.in_(product_ids))
        if for_update:
            query = query.with_for_update()
        by_id = {p.id: p for p in query.all()}
        return [by_id[pid] for pid in product_ids if pid in by_id]

    def get_unsettled_for_farmer(
        self, farmer_id: UUID, for_update: bool = False
    ) -> list[FarmerProduct]:
        query = self._filtered(farmer_id, PaymentStatus.UNSETTLED).order_by(
            FarmerProduct.created_at.asc(), FarmerProduct.name.asc()
        )
        if for_update:
            query = query.with_for_update()
        return query.all()

    def create(self, data: FarmerProductCreate) -> FarmerProduct:
        product = FarmerProduct(
            farmer_id=data.farmer_id,
            name=data.name,
            category=data.category,
            quantity=data.quantity,
            unit=data.unit.value,
            price_per_unit=data.price_per_unit,
            payment_status=PaymentStatus.UNSETTLED.value,
        )
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def update(self, product_id: UUID, data: FarmerProductUpdate) -> FarmerProduct | None:
        product = self.get_by_id(product_id)
        if not product:
            return None
        for key, value in data.model_dump(exclude_unset=True).items():
            if key == "unit" and value is not None:
                value = value.value
            setattr(product, key, value)
        self.db.commit()
        self.db.refresh(product)
        return product

    def delete(self, product_id: UUID) -> bool:
        product = self.get_by_id(product_id)
        if not product:
            return False
        self.db.delete(product)
        self.db.commit()
        return True

    def mark_settled(
        self,
        product: FarmerProduct,
        settlement_id: UUID,
        transaction_image: str,
        settled_at: datetime,
    ) -> FarmerProduct:
        """Flip a product to settled. Flushes only; the caller owns the transaction."""
        product.payment_status = PaymentStatus.SETTLED.value  # type: ignore[assignment]
        product.transaction_image = transaction_image  # type: ignore[assignment]
        product.settlement_id = settlement_id  # type: ignore[assignment]
        product.updated_at = settled_at  # type: ignore[assignment]
        self.db.flush()
        return product
