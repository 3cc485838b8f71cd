"""Read models for settlement history views."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from app.models.farmer_product import FarmerProduct, PaymentStatus
from app.models.shared import to_money
from app.services.settlement_aggregator import is_settled, line_amount, sum_amount


@dataclass
class DailySettlementGroup:
    settlement_date: date
    products: list[FarmerProduct] = field(default_factory=list)

    @property
    def total_amount(self) -> Decimal:
        return sum_amount(self.products)

    @property
    def product_count(self) -> int:
        return len(self.products)

    @property
    def settlement_receipt(self) -> str | None:
        for product in self.products:
            if product.transaction_image:
                return product.transaction_image  # type: ignore[return-value]
        return None


@dataclass
class MonthlySummaryRow:
    name: str
    payment_status: str
    unit: str | None = None
    quantity: Decimal = Decimal("0")
    exact_amount: Decimal = Decimal("0")
    count: int = 0

    @property
    def amount(self) -> Decimal:
        return to_money(self.exact_amount)


@dataclass
class MonthlySummary:
    month: str
    rows: list[MonthlySummaryRow] = field(default_factory=list)

    @property
    def total_amount(self) -> Decimal:
        return to_money(sum((row.exact_amount for row in self.rows), Decimal("0")))

    @property
    def settled_amount(self) -> Decimal:
        settled = PaymentStatus.SETTLED.value
        return to_money(
            sum((r.exact_amount for r in self.rows if r.payment_status == settled), Decimal("0"))
        )

    @property
    def unsettled_amount(self) -> Decimal:
        unsettled = PaymentStatus.UNSETTLED.value
        return to_money(
            sum((r.exact_amount for r in self.rows if r.payment_status == unsettled), Decimal("0"))
        )


def _as_date(value: datetime | date) -> date:
    return value.date() if isinstance(value, datetime) else value


def group_by_calendar_date(settled_items: Iterable[FarmerProduct]) -> list[DailySettlementGroup]:
    """Bucket settled items by the day they were last updated, newest day first.

    An empty input gives an empty list, which callers show as "no
    settlement history".
    """
    groups: dict[date, DailySettlementGroup] = {}
    for item in settled_items:
        if not is_settled(item):
            continue
        day = _as_date(item.updated_at)  # type: ignore[arg-type]
        if day not in groups:
            groups[day] = DailySettlementGroup(settlement_date=day)
        groups[day].products.append(item)
    return sorted(groups.values(), key=lambda g: g.settlement_date, reverse=True)


def group_by_month(items: Iterable[FarmerProduct]) -> list[MonthlySummary]:
    """Monthly summary keyed by the month each item was recorded.

    Within a month, rows with the same (name, payment_status) are merged:
    quantity, amount and count accumulate. Months are newest first; rows
    keep first-appearance order.
    """
    months: dict[str, dict[tuple[str, str], MonthlySummaryRow]] = {}
    for item in items:
        month = _as_date(item.created_at).strftime("%Y-%m")  # type: ignore[arg-type]
        rows = months.setdefault(month, {})
        key = (str(item.name), str(item.payment_status))
        row = rows.get(key)
        if row is None:
            row = MonthlySummaryRow(
                name=key[0], payment_status=key[1], unit=item.unit  # type: ignore[arg-type]
            )
            rows[key] = row
        elif row.unit != item.unit:
            # Mixed units cannot be summed meaningfully as one quantity
            row.unit = None
        row.quantity += Decimal(str(item.quantity))
        row.exact_amount += line_amount(item)
        row.count += 1

    return [
        MonthlySummary(month=month, rows=list(months[month].values()))
        for month in sorted(months, reverse=True)
    ]


class ExpansionState:
    """Which batch keys are expanded in a history view."""

    def __init__(self, expanded: Iterable[str] = ()):
        self._expanded: set[str] = set(expanded)

    @property
    def expanded(self) -> frozenset[str]:
        return frozenset(self._expanded)

    def is_expanded(self, key: str) -> bool:
        return key in self._expanded

    def toggle(self, key: str) -> bool:
        """Flip ``key`` and return whether it is now expanded."""
        if key in self._expanded:
            self._expanded.discard(key)
            return False
        self._expanded.add(key)
        return True

    def collapse_all(self) -> None:
        self._expanded.clear()
