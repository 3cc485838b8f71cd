"""FarmerProduct model - a line item owed to a farmer until it is settled."""

from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Numeric, String, Text, func

from app.core.database import Base
from app.models.shared import UUIDType, generate_uuid


class PaymentStatus(str, Enum):
    UNSETTLED = "unsettled"
    SETTLED = "settled"


class ProductUnit(str, Enum):
    KG = "kg"
    G = "g"
    L = "l"
    ML = "ml"
    PCS = "pcs"
    BOX = "box"
    QUINTAL = "quintal"


class FarmerProduct(Base):
    """One recorded delivery of produce.

    The line amount is quantity * price_per_unit and is never stored.
    payment_status, transaction_image and settlement_id are written only by
    the settlement service.
    """

    __tablename__ = "farmer_products"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    farmer_id = Column(
        UUIDType, ForeignKey("farmers.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=False)
    quantity = Column(Numeric(12, 3), nullable=False, default=0)
    unit = Column(String(20), nullable=False, default=ProductUnit.KG.value)
    price_per_unit = Column(Numeric(12, 2), nullable=False)

    payment_status = Column(
        String(20), nullable=False, default=PaymentStatus.UNSETTLED.value, index=True
    )
    transaction_image = Column(Text, nullable=True)
    settlement_id = Column(
        UUIDType, ForeignKey("settlements.id", ondelete="RESTRICT"), nullable=True, index=True
    )

    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (Index("ix_farmer_products_farmer_status", "farmer_id", "payment_status"),)
