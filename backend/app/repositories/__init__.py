from app.repositories.audit_log_repository import AuditLogRepository
from app.repositories.branch_repository import BranchRepository
from app.repositories.farmer_product_repository import FarmerProductRepository
from app.repositories.farmer_repository import FarmerRepository
from app.repositories.settlement_product_repository import SettlementProductRepository
from app.repositories.settlement_repository import SettlementRepository

__all__ = [
    "AuditLogRepository",
    "BranchRepository",
    "FarmerProductRepository",
    "FarmerRepository",
    "SettlementProductRepository",
    "SettlementRepository",
]
