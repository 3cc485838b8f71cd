"""Settlement service: commit payouts to farmers.

A settlement flips the selected line items to settled, records one
Settlement row and one SettlementProduct snapshot per item. All of it
happens in a single database transaction, so a failure part-way leaves
nothing settled.
"""

import logging
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.auth import CallerContext
from app.core.config import settings
from app.models.farmer_product import FarmerProduct, PaymentStatus
from app.models.settlement import Settlement
from app.models.shared import utc_now
from app.repositories.farmer_product_repository import FarmerProductRepository
from app.repositories.farmer_repository import FarmerRepository
from app.repositories.settlement_product_repository import SettlementProductRepository
from app.repositories.settlement_repository import SettlementRepository
from app.services.audit_service import AuditService
from app.services.settlement_aggregator import (
    SettlementCandidate,
    build_candidate,
    is_settled,
)

logger = logging.getLogger(__name__)


class SettlementValidationError(ValueError):
    """The settlement request was rejected before any write."""


class SettlementPersistenceError(Exception):
    """Writing the settlement failed and the transaction was rolled back."""

    def __init__(
        self,
        message: str,
        failed_product_ids: list[UUID],
        settled_product_ids: list[UUID] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.failed_product_ids = failed_product_ids
        self.settled_product_ids = settled_product_ids or []


def _unique(ids: list[UUID]) -> list[UUID]:
    seen: set[UUID] = set()
    result = []
    for pid in ids:
        if pid not in seen:
            seen.add(pid)
            result.append(pid)
    return result


class SettlementService:
    """Service for settling farmer line items."""

    def __init__(self, db: Session):
        self.db = db
        self.farmer_repo = FarmerRepository(db)
        self.product_repo = FarmerProductRepository(db)
        self.settlement_repo = SettlementRepository(db)
        self.snapshot_repo = SettlementProductRepository(db)
        self.audit_service = AuditService(db)

    def preview(
        self, farmer_id: UUID, product_ids: list[UUID] | None = None
    ) -> SettlementCandidate:
        """Build the candidate that settling ``product_ids`` would commit.

        With no ``product_ids`` the candidate covers every unsettled product.

        Raises:
            SettlementValidationError: If the farmer or selection is invalid.
        """
        farmer = self.farmer_repo.get_by_id(farmer_id)
        if not farmer:
            raise SettlementValidationError(f"Farmer {farmer_id} not found")
        products = self._load_selection(farmer_id, product_ids, for_update=False)
        return build_candidate(farmer, products)

    def settle(
        self,
        farmer_id: UUID,
        product_ids: list[UUID],
        transaction_image: str | None,
        settlement_method: str | None = None,
        notes: str | None = None,
        caller: CallerContext | None = None,
    ) -> Settlement:
        """Settle the selected products of one farmer.

        Args:
            farmer_id: The farmer being paid.
            product_ids: The unsettled products to pay for.
            transaction_image: Reference to the uploaded proof of payment.
            settlement_method: Free text; defaults to the configured method.
            notes: Optional notes stored on the settlement.
            caller: Who is settling, recorded as created_by.

        Returns:
            The committed Settlement.

        Raises:
            SettlementValidationError: If the proof is missing, the selection
                is empty or invalid, or the total is not positive. Nothing is
                written.
            SettlementPersistenceError: If a write failed. The transaction is
                rolled back, so no product was settled.
        """
        image = (transaction_image or "").strip()
        if not image:
            raise SettlementValidationError(
                "Please upload a transaction proof image before settling"
            )
        if not product_ids:
            raise SettlementValidationError("Select at least one product to settle")

        farmer = self.farmer_repo.get_by_id(farmer_id)
        if not farmer:
            raise SettlementValidationError(f"Farmer {farmer_id} not found")

        return self._commit(
            farmer_id=farmer_id,
            branch_id=farmer.branch_id,  # type: ignore[arg-type]
            product_ids=_unique(product_ids),
            transaction_image=image,
            settlement_method=settlement_method or settings.DEFAULT_SETTLEMENT_METHOD,
            notes=notes,
            caller=caller,
        )

    def settle_product(
        self,
        product_id: UUID,
        transaction_image: str | None,
        settlement_method: str | None = None,
        notes: str | None = None,
        caller: CallerContext | None = None,
    ) -> Settlement:
        """Settle a single product."""
        product = self.product_repo.get_by_id(product_id)
        if not product:
            raise SettlementValidationError(f"Product {product_id} not found")
        return self.settle(
            farmer_id=product.farmer_id,  # type: ignore[arg-type]
            product_ids=[product_id],
            transaction_image=transaction_image,
            settlement_method=settlement_method,
            notes=notes,
            caller=caller,
        )

    def settle_all_unsettled(
        self,
        farmer_id: UUID,
        transaction_image: str | None,
        settlement_method: str | None = None,
        notes: str | None = None,
        caller: CallerContext | None = None,
    ) -> Settlement:
        """Settle every product of the farmer that is still unsettled."""
        unsettled = self.product_repo.get_unsettled_for_farmer(farmer_id)
        return self.settle(
            farmer_id=farmer_id,
            product_ids=[UUID(str(p.id)) for p in unsettled],
            transaction_image=transaction_image,
            settlement_method=settlement_method,
            notes=notes,
            caller=caller,
        )

    def _load_selection(
        self, farmer_id: UUID, product_ids: list[UUID] | None, for_update: bool
    ) -> list[FarmerProduct]:
        if product_ids is None:
            products = self.product_repo.get_unsettled_for_farmer(farmer_id, for_update=for_update)
            if not products:
                raise SettlementValidationError("Farmer has no unsettled products")
            return products

        ids = _unique(product_ids)
        if not ids:
            raise SettlementValidationError("Select at least one product to settle")
        products = self.product_repo.get_by_ids(ids, for_update=for_update)

        found = {p.id for p in products}
        missing = [str(pid) for pid in ids if pid not in found]
        if missing:
            raise SettlementValidationError(f"Products not found: {', '.join(missing)}")

        foreign = [p.name for p in products if p.farmer_id != farmer_id]
        if foreign:
            raise SettlementValidationError(
                f"Products do not belong to farmer {farmer_id}: {', '.join(foreign)}"
            )

        already = [p.name for p in products if is_settled(p)]
        if already:
            raise SettlementValidationError(f"Products already settled: {', '.join(already)}")

        return products

    def _commit(
        self,
        farmer_id: UUID,
        branch_id: UUID | None,
        product_ids: list[UUID],
        transaction_image: str,
        settlement_method: str,
        notes: str | None,
        caller: CallerContext | None,
    ) -> Settlement:
        current: FarmerProduct | None = None
        products: list[FarmerProduct] = []
        try:
            # Locked re-read: a concurrent settlement of the same rows fails
            # the already-settled check instead of paying twice.
            products = self._load_selection(farmer_id, product_ids, for_update=True)
            farmer = self.farmer_repo.get_by_id(farmer_id)
            candidate = build_candidate(farmer, products)  # type: ignore[arg-type]
            if candidate.total_amount <= 0:
                raise SettlementValidationError("Settlement amount must be greater than zero")

            settled_at = utc_now()
            settlement = self.settlement_repo.add(
                farmer_id=farmer_id,
                total_amount=candidate.total_amount,
                product_count=len(products),
                transaction_image=transaction_image,
                settlement_date=settled_at,
                settlement_method=settlement_method,
                notes=notes,
                created_by=caller.user_id if caller else None,
            )
            settlement_id = UUID(str(settlement.id))

            for product in products:
                current = product
                self.product_repo.mark_settled(
                    product, settlement_id, transaction_image, settled_at
                )
            current = None

            self.snapshot_repo.add_snapshots(settlement_id, products)
            self.audit_service.log_status_change(
                resource_type="settlement",
                resource_id=settlement_id,
                old_status=PaymentStatus.UNSETTLED.value,
                new_status=PaymentStatus.SETTLED.value,
                caller=caller,
                branch_id=branch_id,
                metadata={
                    "farmer_id": farmer_id,
                    "settled_amount": candidate.total_amount,
                    "product_count": len(products),
                    "product_ids": ",".join(str(p.id) for p in products),
                },
                commit=False,
            )
            self.db.commit()
        except SettlementValidationError:
            self.db.rollback()
            raise
        except SQLAlchemyError as exc:
            self.db.rollback()
            if current is not None:
                failed = [UUID(str(current.id))]
                message = f"Failed to update payment status for {current.name}"
            else:
                failed = [UUID(str(p.id)) for p in products] or list(product_ids)
                message = "Failed to record settlement"
            logger.exception(
                "Settlement for farmer %s rolled back; %d product(s) left unsettled",
                farmer_id,
                len(product_ids),
            )
            raise SettlementPersistenceError(message, failed_product_ids=failed) from exc

        self.db.refresh(settlement)
        logger.info(
            "Settled %d product(s) for farmer %s: %s",
            settlement.product_count,
            farmer_id,
            settlement.settled_amount,
        )
        return settlement
