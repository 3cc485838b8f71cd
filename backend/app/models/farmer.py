"""Farmer model - the producers who are owed for delivered produce."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, func

from app.core.database import Base
from app.models.shared import UUIDType, generate_uuid


class Farmer(Base):
    __tablename__ = "farmers"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    branch_id = Column(
        UUIDType, ForeignKey("branches.id", ondelete="SET NULL"), nullable=True, index=True
    )
    name = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False, index=True)
    email = Column(String(255), nullable=True)

    village = Column(String(255), nullable=True)
    district = Column(String(255), nullable=True)
    state = Column(String(255), nullable=True)
    address = Column(String(500), nullable=True)

    # Payout details shown to whoever makes the transfer
    bank_name = Column(String(255), nullable=True)
    account_number = Column(String(50), nullable=True)
    ifsc_code = Column(String(20), nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)
    date_joined = Column(DateTime(timezone=True), server_default=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
