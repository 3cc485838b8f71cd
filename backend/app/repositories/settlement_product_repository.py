"""SettlementProduct repository for data access."""

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy.orm import Session

from app.models.farmer_product import FarmerProduct
from app.models.settlement_product import SettlementProduct
from app.services.settlement_aggregator import line_amount


class SettlementProductRepository:
    """Repository for SettlementProduct snapshots."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_settlement_id(self, settlement_id: UUID) -> list[SettlementProduct]:
        """Get all snapshots for a settlement."""
        return (
            self.db.query(SettlementProduct)
            .filter(SettlementProduct.settlement_id == settlement_id)
            .order_by(SettlementProduct.product_name.asc())
            .all()
        )

    def add_snapshots(
        self,
        settlement_id: UUID,
        products: Iterable[FarmerProduct],
    ) -> list[SettlementProduct]:
        """Copy each product into a snapshot row. Flushes only; the caller owns the transaction."""
        snapshots = []
        for product in products:
            snapshot = SettlementProduct(
                settlement_id=settlement_id,
                farmer_product_id=product.id,
                product_name=product.name,
                quantity=product.quantity,
                unit=product.unit,
                price_per_unit=product.price_per_unit,
                total_amount=line_amount(product),
            )
            self.db.add(snapshot)
            snapshots.append(snapshot)

        self.db.flush()
        return snapshots
