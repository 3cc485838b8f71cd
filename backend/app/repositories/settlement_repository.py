"""Settlement repository for data access."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Query, Session

from app.models.farmer import Farmer
from app.models.settlement import Settlement


class SettlementRepository:
    """Repository for Settlement model.

    Settlements are append-only: there is no update or delete.
    """

    def __init__(self, db: Session):
        self.db = db

    def _filtered(
        self,
        farmer_id: UUID | None = None,
        branch_ids: list[UUID] | None = None,
    ) -> Query:  # type: ignore[type-arg]
        query = self.db.query(Settlement)
        if farmer_id is not None:
            query = query.filter(Settlement.farmer_id == farmer_id)
        if branch_ids is not None:
            query = query.join(Farmer, Farmer.id == Settlement.farmer_id).filter(
                Farmer.branch_id.in_(branch_ids)
            )
        return query

    def get_all(
        self,
        farmer_id: UUID | None = None,
        branch_ids: list[UUID] | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Settlement]:
        """Get settlements, newest first."""
        return (
            self._filtered(farmer_id, branch_ids)
            .order_by(Settlement.settlement_date.desc(), Settlement.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count(self, farmer_id: UUID | None = None, branch_ids: list[UUID] | None = None) -> int:
        return self._filtered(farmer_id, branch_ids).count()

    def get_by_id(self, settlement_id: UUID) -> Settlement | None:
        return self.db.query(Settlement).filter(Settlement.id == settlement_id).first()

    def add(
        self,
        *,
        farmer_id: UUID,
        total_amount: Decimal,
        product_count: int,
        transaction_image: str,
        settlement_date: datetime,
        settlement_method: str,
        notes: str | None = None,
        created_by: str | None = None,
    ) -> Settlement:
        """Stage a new settlement. Flushes only; the caller owns the transaction."""
        settlement = Settlement(
            farmer_id=farmer_id,
            total_amount=total_amount,
            settled_amount=total_amount,
            product_count=product_count,
            transaction_image=transaction_image,
            settlement_date=settlement_date,
            settlement_method=settlement_method,
            notes=notes,
            created_by=created_by,
        )
        self.db.add(settlement)
        self.db.flush()
        return settlement
