from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class FarmerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=5, max_length=20)
    email: EmailStr | None = None
    branch_id: UUID | None = None
    village: str | None = Field(default=None, max_length=255)
    district: str | None = Field(default=None, max_length=255)
    state: str | None = Field(default=None, max_length=255)
    address: str | None = Field(default=None, max_length=500)
    bank_name: str | None = Field(default=None, max_length=255)
    account_number: str | None = Field(default=None, max_length=50)
    ifsc_code: str | None = Field(default=None, max_length=20)


class FarmerUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    phone: str | None = Field(default=None, min_length=5, max_length=20)
    email: EmailStr | None = None
    branch_id: UUID | None = None
    village: str | None = Field(default=None, max_length=255)
    district: str | None = Field(default=None, max_length=255)
    state: str | None = Field(default=None, max_length=255)
    address: str | None = Field(default=None, max_length=500)
    bank_name: str | None = Field(default=None, max_length=255)
    account_number: str | None = Field(default=None, max_length=50)
    ifsc_code: str | None = Field(default=None, max_length=20)
    is_active: bool | None = None


class FarmerResponse(BaseModel):
    id: UUID
    name: str
    phone: str
    email: str | None
    branch_id: UUID | None
    village: str | None
    district: str | None
    state: str | None
    address: str | None
    bank_name: str | None
    account_number: str | None
    ifsc_code: str | None
    is_active: bool
    date_joined: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
