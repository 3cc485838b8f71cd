"""Tests for settlement history read models."""

import uuid
from datetime import UTC, date, datetime
from decimal import Decimal

from app.models.farmer_product import FarmerProduct, PaymentStatus
from app.services.settlement_presenter import (
    ExpansionState,
    group_by_calendar_date,
    group_by_month,
)

FARMER_ID = uuid.uuid4()


def _item(
    name: str = "Tomatoes",
    quantity: str = "1",
    price: str = "10",
    unit: str = "kg",
    status: PaymentStatus = PaymentStatus.SETTLED,
    image: str | None = "proof.png",
    created_at: datetime = datetime(2024, 3, 5, 9, 0, tzinfo=UTC),
    updated_at: datetime = datetime(2024, 3, 6, 9, 0, tzinfo=UTC),
) -> FarmerProduct:
    return FarmerProduct(
        id=uuid.uuid4(),
        farmer_id=FARMER_ID,
        name=name,
        category="Vegetables",
        quantity=Decimal(quantity),
        unit=unit,
        price_per_unit=Decimal(price),
        payment_status=status.value,
        transaction_image=image,
        created_at=created_at,
        updated_at=updated_at,
    )


class TestGroupByCalendarDate:
    def test_empty_history(self):
        """No settled items means no history groups."""
        assert group_by_calendar_date([]) == []

    def test_buckets_by_update_day_newest_first(self):
        items = [
            _item(name="A", updated_at=datetime(2024, 3, 1, 8, 0, tzinfo=UTC)),
            _item(name="B", updated_at=datetime(2024, 3, 2, 8, 0, tzinfo=UTC)),
            _item(name="C", updated_at=datetime(2024, 3, 1, 17, 30, tzinfo=UTC)),
        ]
        groups = group_by_calendar_date(items)
        assert [g.settlement_date for g in groups] == [date(2024, 3, 2), date(2024, 3, 1)]
        assert [p.name for p in groups[1].products] == ["A", "C"]
        assert groups[1].product_count == 2
        assert groups[1].total_amount == Decimal("20.00")

    def test_receipt_is_first_image_in_bucket(self):
        items = [_item(name="A", image=None), _item(name="B", image="b.png")]
        groups = group_by_calendar_date(items)
        assert groups[0].settlement_receipt == "b.png"

    def test_skips_unsettled_items(self):
        items = [_item(status=PaymentStatus.UNSETTLED, image=None)]
        assert group_by_calendar_date(items) == []

    def test_idempotent(self):
        """Grouping the same items twice gives identical groups."""
        items = [
            _item(name="A", updated_at=datetime(2024, 3, 1, tzinfo=UTC)),
            _item(name="B", updated_at=datetime(2024, 3, 2, tzinfo=UTC)),
        ]
        first = group_by_calendar_date(items)
        second = group_by_calendar_date(items)
        assert first == second


class TestGroupByMonth:
    def test_merges_same_name_and_status(self):
        """Two Tomatoes/unsettled rows in one month become one row."""
        items = [
            _item(name="Tomatoes", quantity="5", price="20", status=PaymentStatus.UNSETTLED),
            _item(name="Tomatoes", quantity="3", price="20", status=PaymentStatus.UNSETTLED),
        ]
        months = group_by_month(items)
        assert len(months) == 1
        assert months[0].month == "2024-03"
        assert len(months[0].rows) == 1
        row = months[0].rows[0]
        assert row.quantity == Decimal("8")
        assert row.amount == Decimal("160.00")
        assert row.count == 2
        assert row.unit == "kg"

    def test_different_status_stays_separate(self):
        items = [
            _item(name="Onions", status=PaymentStatus.UNSETTLED),
            _item(name="Onions", status=PaymentStatus.SETTLED),
        ]
        month = group_by_month(items)[0]
        assert [(r.name, r.payment_status) for r in month.rows] == [
            ("Onions", "unsettled"),
            ("Onions", "settled"),
        ]
        assert month.total_amount == Decimal("20.00")
        assert month.settled_amount == Decimal("10.00")
        assert month.unsettled_amount == Decimal("10.00")

    def test_mixed_units_clear_unit(self):
        items = [_item(name="Milk", unit="l"), _item(name="Milk", unit="ml")]
        row = group_by_month(items)[0].rows[0]
        assert row.unit is None
        assert row.count == 2

    def test_months_newest_first(self):
        items = [
            _item(name="A", created_at=datetime(2024, 1, 15, tzinfo=UTC)),
            _item(name="B", created_at=datetime(2024, 3, 15, tzinfo=UTC)),
            _item(name="C", created_at=datetime(2023, 12, 31, tzinfo=UTC)),
        ]
        assert [m.month for m in group_by_month(items)] == ["2024-03", "2024-01", "2023-12"]

    def test_empty(self):
        assert group_by_month([]) == []

    def test_idempotent(self):
        """Grouping the same mixed-month items twice gives identical summaries."""
        jan = datetime(2024, 1, 10, tzinfo=UTC)
        feb = datetime(2024, 2, 3, tzinfo=UTC)
        items = [
            _item(name="Okra", created_at=jan),
            _item(name="Okra", status=PaymentStatus.UNSETTLED, image=None, created_at=jan),
            _item(name="Okra", created_at=feb),
            _item(name="Beans", quantity="0.005", price="1", created_at=feb),
        ]
        first = group_by_month(items)
        second = group_by_month(items)
        assert first == second
        assert [m.month for m in first] == ["2024-02", "2024-01"]
        assert [m.total_amount for m in first] == [m.total_amount for m in second]

    def test_sub_cent_amounts_round_once(self):
        """Merged rows and month totals round the exact sum, not each line."""
        items = [_item(name="Seedlings", quantity="0.005", price="1") for _ in range(3)]
        month = group_by_month(items)[0]
        assert month.rows[0].exact_amount == Decimal("0.015")
        assert month.rows[0].amount == Decimal("0.02")
        assert month.total_amount == Decimal("0.02")
        assert month.settled_amount == Decimal("0.02")
        assert month.unsettled_amount == Decimal("0.00")


class TestExpansionState:
    def test_toggle(self):
        state = ExpansionState()
        assert state.toggle("batch-1") is True
        assert state.is_expanded("batch-1")
        assert state.toggle("batch-1") is False
        assert not state.is_expanded("batch-1")

    def test_collapse_all(self):
        state = ExpansionState(["a", "b"])
        state.collapse_all()
        assert state.expanded == frozenset()

    def test_expanded_is_a_copy(self):
        state = ExpansionState(["a"])
        snapshot = state.expanded
        state.toggle("b")
        assert snapshot == frozenset({"a"})
