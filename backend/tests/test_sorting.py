"""Tests for the apply_order_by sorting utility."""

from app.core.sorting import apply_order_by, parse_order_by
from app.models.audit_log import AuditLog
from app.models.farmer_product import FarmerProduct


class TestApplyOrderBy:
    """Tests for the core sorting utility function."""

    def _names(self, db_session, order_by, **defaults):
        query = apply_order_by(db_session.query(FarmerProduct), FarmerProduct, order_by, **defaults)
        return [p.name for p in query.all()]

    def test_sort_by_valid_field_asc(self, db_session, make_farmer, make_product):
        farmer = make_farmer()
        make_product(farmer, name="Cabbage", price_per_unit="30")
        make_product(farmer, name="Apples", price_per_unit="90")
        make_product(farmer, name="Beets", price_per_unit="10")
        assert self._names(db_session, "name:asc") == ["Apples", "Beets", "Cabbage"]

    def test_sort_by_valid_field_desc(self, db_session, make_farmer, make_product):
        farmer = make_farmer()
        make_product(farmer, name="Cabbage", price_per_unit="30")
        make_product(farmer, name="Apples", price_per_unit="90")
        make_product(farmer, name="Beets", price_per_unit="10")
        assert self._names(db_session, "price_per_unit:desc") == ["Apples", "Cabbage", "Beets"]

    def test_no_direction_defaults_to_asc(self, db_session, make_farmer, make_product):
        farmer = make_farmer()
        make_product(farmer, name="B")
        make_product(farmer, name="A")
        assert self._names(db_session, "name") == ["A", "B"]

    def test_invalid_field_falls_back_to_default(self, db_session, make_farmer, make_product):
        """Unknown columns use the default ordering instead of failing."""
        farmer = make_farmer()
        make_product(farmer, name="B")
        make_product(farmer, name="A")
        names = self._names(
            db_session, "no_such_column:asc", default_field="name", default_direction="desc"
        )
        assert names == ["B", "A"]

    def test_non_column_attribute_is_ignored(self, db_session, make_farmer, make_product):
        """Only mapped columns are accepted, not arbitrary attributes."""
        farmer = make_farmer()
        make_product(farmer, name="B")
        make_product(farmer, name="A")
        names = self._names(db_session, "__table__:asc", default_field="name")
        assert names == ["B", "A"]

    def test_invalid_direction_defaults_to_asc(self, db_session, make_farmer, make_product):
        farmer = make_farmer()
        make_product(farmer, name="B")
        make_product(farmer, name="A")
        assert self._names(db_session, "name:sideways") == ["A", "B"]

    def test_renamed_column_attribute(self, db_session):
        """Attributes mapped under a different column name still sort."""
        query = apply_order_by(db_session.query(AuditLog), AuditLog, "metadata_:asc")
        assert query.all() == []

    def test_multiple_keys(self, db_session, make_farmer, make_product):
        """Later keys break ties left by earlier ones."""
        farmer = make_farmer()
        make_product(farmer, name="Okra", price_per_unit="30")
        make_product(farmer, name="Beans", price_per_unit="30")
        make_product(farmer, name="Garlic", price_per_unit="90")
        names = self._names(db_session, "price_per_unit:desc,name:asc")
        assert names == ["Garlic", "Beans", "Okra"]

    def test_unknown_keys_are_skipped(self, db_session, make_farmer, make_product):
        farmer = make_farmer()
        make_product(farmer, name="B")
        make_product(farmer, name="A")
        assert self._names(db_session, "bogus:desc, name:asc") == ["A", "B"]


class TestParseOrderBy:
    def test_empty(self):
        assert parse_order_by(FarmerProduct, None) == []
        assert parse_order_by(FarmerProduct, "") == []

    def test_defaults_direction_and_drops_repeats(self):
        keys = parse_order_by(FarmerProduct, "name,quantity:sideways,name:desc")
        assert keys == [("name", "asc"), ("quantity", "asc")]

    def test_only_mapped_columns(self):
        assert parse_order_by(FarmerProduct, "__table__:asc,line_amount:desc") == []
