from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class BranchCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    code: str = Field(..., min_length=1, max_length=50)
    address: str | None = Field(default=None, max_length=500)


class BranchResponse(BaseModel):
    id: UUID
    name: str
    code: str
    address: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
