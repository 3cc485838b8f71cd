"""In-memory aggregation over farmer line items.

Everything here is pure: no session, no I/O. Inputs are FarmerProduct rows
that were already loaded (or any object with the same attributes).
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID

from app.models.farmer import Farmer
from app.models.farmer_product import FarmerProduct, PaymentStatus
from app.models.shared import to_money

NO_RECEIPT_KEY = "no-receipt"


@dataclass
class Partition:
    unsettled: list[FarmerProduct]
    settled: list[FarmerProduct]


@dataclass
class BatchGroup:
    """Settled items that appear to have been paid together.

    Display only: membership is inferred, not recorded.
    """

    key: str
    settlement_id: UUID | None
    transaction_image: str | None
    products: list[FarmerProduct] = field(default_factory=list)

    @property
    def total_amount(self) -> Decimal:
        return sum_amount(self.products)

    @property
    def product_count(self) -> int:
        return len(self.products)


@dataclass
class SettlementCandidate:
    farmer: Farmer
    total_amount: Decimal
    unsettled_amount: Decimal
    items: list[FarmerProduct]


@dataclass
class FarmerSettlementSummary:
    farmer: Farmer
    total_amount: Decimal = Decimal("0.00")
    settled_amount: Decimal = Decimal("0.00")
    unsettled_amount: Decimal = Decimal("0.00")
    products: list[FarmerProduct] = field(default_factory=list)
    unsettled_products: list[FarmerProduct] = field(default_factory=list)
    settlement_receipt: str | None = None

    @property
    def product_count(self) -> int:
        return len(self.products)


def line_amount(item: FarmerProduct) -> Decimal:
    """Exact quantity x price_per_unit.

    Not rounded: totals add exact line amounts and round once with to_money.
    """
    return Decimal(str(item.quantity)) * Decimal(str(item.price_per_unit))


def is_settled(item: FarmerProduct) -> bool:
    return item.payment_status == PaymentStatus.SETTLED.value


def partition(items: Iterable[FarmerProduct]) -> Partition:
    """Split items into unsettled and settled, keeping input order."""
    result = Partition(unsettled=[], settled=[])
    for item in items:
        if is_settled(item):
            result.settled.append(item)
        else:
            result.unsettled.append(item)
    return result


def sum_amount(items: Iterable[FarmerProduct]) -> Decimal:
    """Sum the exact line amounts of ``items``, rounded to cents once.

    An empty slice sums to 0.00.
    """
    total = sum((line_amount(item) for item in items), Decimal("0"))
    return to_money(total)


def _batch_key(item: FarmerProduct) -> str:
    if item.settlement_id is not None:
        return str(item.settlement_id)
    if item.transaction_image:
        return str(item.transaction_image)
    return NO_RECEIPT_KEY


def group_settled_by_batch_key(settled_items: Iterable[FarmerProduct]) -> list[BatchGroup]:
    """Group settled items into probable payout batches.

    Items carry a settlement_id when they were settled through the
    settlement service. Older rows only have a proof image, which is used
    as the key instead; rows with neither share the no-receipt bucket.
    Groups are returned in order of first appearance.
    """
    groups: dict[str, BatchGroup] = {}
    for item in settled_items:
        key = _batch_key(item)
        group = groups.get(key)
        if group is None:
            group = BatchGroup(
                key=key,
                settlement_id=item.settlement_id,  # type: ignore[arg-type]
                transaction_image=item.transaction_image,  # type: ignore[arg-type]
            )
            groups[key] = group
        elif group.transaction_image is None and item.transaction_image:
            group.transaction_image = item.transaction_image  # type: ignore[assignment]
        group.products.append(item)
    return list(groups.values())


def build_candidate(farmer: Farmer, selected_items: Sequence[FarmerProduct]) -> SettlementCandidate:
    """Describe what settling ``selected_items`` would pay out."""
    total = sum_amount(selected_items)
    return SettlementCandidate(
        farmer=farmer,
        total_amount=total,
        unsettled_amount=total,
        items=list(selected_items),
    )


def summarize_farmer(farmer: Farmer, items: Iterable[FarmerProduct]) -> FarmerSettlementSummary:
    """Totals for one farmer's payment details view."""
    summary = FarmerSettlementSummary(farmer=farmer)
    _accumulate(summary, items)
    return summary


def summarize_farmers(
    farmers: Iterable[Farmer], items: Iterable[FarmerProduct]
) -> list[FarmerSettlementSummary]:
    """Per-farmer totals, largest outstanding balance first.

    Items whose farmer is not in ``farmers`` are ignored. Farmers without
    any items are left out.
    """
    farmer_map = {farmer.id: farmer for farmer in farmers}
    by_farmer: dict[UUID, list[FarmerProduct]] = {}
    for item in items:
        if item.farmer_id not in farmer_map:
            continue
        by_farmer.setdefault(item.farmer_id, []).append(item)  # type: ignore[arg-type]

    summaries = [
        summarize_farmer(farmer_map[farmer_id], farmer_items)
        for farmer_id, farmer_items in by_farmer.items()
    ]
    return sorted(summaries, key=lambda s: s.unsettled_amount, reverse=True)


def _accumulate(summary: FarmerSettlementSummary, items: Iterable[FarmerProduct]) -> None:
    total = settled = unsettled = Decimal("0")
    for item in items:
        amount = line_amount(item)
        total += amount
        summary.products.append(item)
        if is_settled(item):
            settled += amount
            if summary.settlement_receipt is None and item.transaction_image:
                summary.settlement_receipt = item.transaction_image  # type: ignore[assignment]
        else:
            unsettled += amount
            summary.unsettled_products.append(item)
    summary.total_amount = to_money(total)
    summary.settled_amount = to_money(settled)
    summary.unsettled_amount = to_money(unsettled)
