"""Settlement request, response and read-model schemas."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.farmer import FarmerResponse
from app.schemas.farmer_product import FarmerProductResponse


class SettlementCreate(BaseModel):
    """Settle a selection of a farmer's unsettled products.

    When product_ids is omitted every unsettled product of the farmer is settled.
    """

    farmer_id: UUID
    product_ids: list[UUID] | None = None
    transaction_image: str = Field(default="", max_length=2_000_000)
    settlement_method: str | None = Field(default=None, max_length=50)
    notes: str | None = None


class SingleProductSettle(BaseModel):
    transaction_image: str = Field(default="", max_length=2_000_000)
    settlement_method: str | None = Field(default=None, max_length=50)
    notes: str | None = None


class SettlementPreviewRequest(BaseModel):
    farmer_id: UUID
    product_ids: list[UUID] | None = None


class SettlementProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    settlement_id: UUID
    farmer_product_id: UUID
    product_name: str
    quantity: Decimal
    unit: str | None = None
    price_per_unit: Decimal
    total_amount: Decimal
    created_at: datetime


class SettlementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    farmer_id: UUID
    total_amount: Decimal
    settled_amount: Decimal
    product_count: int
    transaction_image: str
    settlement_date: datetime
    settlement_method: str
    notes: str | None = None
    created_by: str | None = None
    created_at: datetime
    updated_at: datetime


class SettlementDetailResponse(SettlementResponse):
    products: list[SettlementProductResponse] = Field(default_factory=list)


class SettlementCandidateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    farmer: FarmerResponse
    total_amount: Decimal
    unsettled_amount: Decimal
    items: list[FarmerProductResponse]


class FarmerSettlementSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    farmer: FarmerResponse
    total_amount: Decimal
    settled_amount: Decimal
    unsettled_amount: Decimal
    product_count: int
    unsettled_products: list[FarmerProductResponse]
    settlement_receipt: str | None = None


class BatchGroupResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    key: str
    settlement_id: UUID | None = None
    transaction_image: str | None = None
    products: list[FarmerProductResponse]
    total_amount: Decimal
    product_count: int


class DailySettlementGroupResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    settlement_date: date
    products: list[FarmerProductResponse]
    total_amount: Decimal
    product_count: int
    settlement_receipt: str | None = None


class MonthlySummaryRowResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    payment_status: str
    unit: str | None = None
    quantity: Decimal
    amount: Decimal
    count: int


class MonthlySummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    month: str
    rows: list[MonthlySummaryRowResponse]
    total_amount: Decimal
    settled_amount: Decimal
    unsettled_amount: Decimal
