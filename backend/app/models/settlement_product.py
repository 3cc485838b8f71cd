"""SettlementProduct model - frozen copy of a line item at settlement time."""

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String, func

from app.core.database import Base
from app.models.shared import UUIDType, generate_uuid


class SettlementProduct(Base):
    __tablename__ = "settlement_products"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    settlement_id = Column(
        UUIDType, ForeignKey("settlements.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    # No FK: the snapshot outlives edits and deletion of the source row
    farmer_product_id = Column(UUIDType, nullable=False, index=True)

    product_name = Column(String(255), nullable=False)
    quantity = Column(Numeric(12, 3), nullable=False)
    unit = Column(String(20), nullable=True)
    price_per_unit = Column(Numeric(12, 2), nullable=False)
    # Exact line amount; the settlement total is this summed and rounded once
    total_amount = Column(Numeric(15, 5), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
