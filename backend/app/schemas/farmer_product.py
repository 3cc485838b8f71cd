"""FarmerProduct schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, computed_field

from app.models.farmer_product import ProductUnit
from app.models.shared import to_money


class FarmerProductCreate(BaseModel):
    farmer_id: UUID
    name: str = Field(..., min_length=1, max_length=255)
    category: str = Field(..., min_length=1, max_length=100)
    quantity: Decimal = Field(default=Decimal("0"), ge=0)
    unit: ProductUnit = ProductUnit.KG
    price_per_unit: Decimal = Field(..., ge=0)


class FarmerProductUpdate(BaseModel):
    """Corrections allowed while a line item is still unsettled."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    category: str | None = Field(default=None, min_length=1, max_length=100)
    quantity: Decimal | None = Field(default=None, ge=0)
    unit: ProductUnit | None = None
    price_per_unit: Decimal | None = Field(default=None, ge=0)
    is_active: bool | None = None


class FarmerProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    farmer_id: UUID
    name: str
    category: str
    quantity: Decimal
    unit: str
    price_per_unit: Decimal
    payment_status: str
    transaction_image: str | None = None
    settlement_id: UUID | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_amount(self) -> Decimal:
        return to_money(self.quantity * self.price_per_unit)
