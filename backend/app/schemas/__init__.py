from app.schemas.audit_log import AuditLogResponse
from app.schemas.branch import BranchCreate, BranchResponse
from app.schemas.farmer import FarmerCreate, FarmerResponse, FarmerUpdate
from app.schemas.farmer_product import (
    FarmerProductCreate,
    FarmerProductResponse,
    FarmerProductUpdate,
)
from app.schemas.settlement import (
    BatchGroupResponse,
    DailySettlementGroupResponse,
    FarmerSettlementSummaryResponse,
    MonthlySummaryResponse,
    MonthlySummaryRowResponse,
    SettlementCandidateResponse,
    SettlementCreate,
    SettlementDetailResponse,
    SettlementPreviewRequest,
    SettlementProductResponse,
    SettlementResponse,
    SingleProductSettle,
)

__all__ = [
    "AuditLogResponse",
    "BatchGroupResponse",
    "BranchCreate",
    "BranchResponse",
    "DailySettlementGroupResponse",
    "FarmerCreate",
    "FarmerProductCreate",
    "FarmerProductResponse",
    "FarmerProductUpdate",
    "FarmerResponse",
    "FarmerSettlementSummaryResponse",
    "FarmerUpdate",
    "MonthlySummaryResponse",
    "MonthlySummaryRowResponse",
    "SettlementCandidateResponse",
    "SettlementCreate",
    "SettlementDetailResponse",
    "SettlementPreviewRequest",
    "SettlementProductResponse",
    "SettlementResponse",
    "SingleProductSettle",
]
