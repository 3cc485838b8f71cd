from app.models.audit_log import AuditLog
from app.models.branch import Branch
from app.models.farmer import Farmer
from app.models.farmer_product import FarmerProduct, PaymentStatus, ProductUnit
from app.models.settlement import Settlement
from app.models.settlement_product import SettlementProduct

__all__ = [
    "AuditLog",
    "Branch",
    "Farmer",
    "FarmerProduct",
    "PaymentStatus",
    "ProductUnit",
    "Settlement",
    "SettlementProduct",
]
