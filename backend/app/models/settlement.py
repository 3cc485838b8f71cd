"""Settlement model - one confirmed payout to a farmer."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text, func

from app.core.database import Base
from app.models.shared import UUIDType, generate_uuid


class Settlement(Base):
    """Settlement model - aggregate record of one settlement action.

    product_count and settled_amount always match the SettlementProduct
    snapshots written alongside it. Rows are never updated or deleted.
    """

    __tablename__ = "settlements"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    farmer_id = Column(
        UUIDType, ForeignKey("farmers.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    total_amount = Column(Numeric(12, 2), nullable=False, default=0)
    settled_amount = Column(Numeric(12, 2), nullable=False, default=0)
    product_count = Column(Integer, nullable=False, default=0)
    transaction_image = Column(Text, nullable=False)
    settlement_date = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    settlement_method = Column(String(50), nullable=False, default="manual")
    notes = Column(Text, nullable=True)
    created_by = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
