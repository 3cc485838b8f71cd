"""Tests for the settlement API endpoints."""

import uuid
from decimal import Decimal
from unittest.mock import patch

from sqlalchemy.exc import SQLAlchemyError

from app.models.farmer_product import PaymentStatus
from app.models.settlement import Settlement
from app.repositories.farmer_product_repository import FarmerProductRepository

PROOF = "https://files.example.com/receipts/neft-77.jpg"


class TestCreateSettlement:
    def test_settle_selection(self, client, manager_headers, make_farmer, make_product):
        """Settling two of three items reports 250.00 and leaves 250.00 owed."""
        farmer = make_farmer()
        p1 = make_product(farmer, name="Okra", quantity="1", price_per_unit="100")
        p2 = make_product(farmer, name="Beans", quantity="1", price_per_unit="150")
        make_product(farmer, name="Garlic", quantity="1", price_per_unit="250")

        response = client.post(
            "/v1/settlements/",
            json={
                "farmer_id": str(farmer.id),
                "product_ids": [str(p1.id), str(p2.id)],
                "transaction_image": PROOF,
            },
            headers=manager_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert Decimal(data["settled_amount"]) == Decimal("250.00")
        assert data["product_count"] == 2
        assert data["transaction_image"] == PROOF
        assert data["created_by"] == "manager-1"

        summary = client.get(
            f"/v1/farmers/{farmer.id}/payment_summary", headers=manager_headers
        ).json()
        assert Decimal(summary["unsettled_amount"]) == Decimal("250.00")
        assert Decimal(summary["settled_amount"]) == Decimal("250.00")

    def test_settle_all_when_no_selection(self, client, admin_headers, make_farmer, make_product):
        farmer = make_farmer()
        make_product(farmer, quantity="1", price_per_unit="100")
        make_product(farmer, quantity="1", price_per_unit="150")

        response = client.post(
            "/v1/settlements/",
            json={"farmer_id": str(farmer.id), "transaction_image": PROOF},
            headers=admin_headers,
        )

        assert response.status_code == 201
        assert response.json()["product_count"] == 2

    def test_missing_proof_returns_400(
        self, client, manager_headers, db_session, make_farmer, make_product
    ):
        """Missing proof blocks the settlement and creates no batch."""
        farmer = make_farmer()
        product = make_product(farmer)

        response = client.post(
            "/v1/settlements/",
            json={"farmer_id": str(farmer.id), "product_ids": [str(product.id)]},
            headers=manager_headers,
        )

        assert response.status_code == 400
        assert "transaction proof" in response.json()["detail"]
        assert db_session.query(Settlement).count() == 0

    def test_empty_selection_returns_400(self, client, manager_headers, make_farmer):
        farmer = make_farmer()
        response = client.post(
            "/v1/settlements/",
            json={"farmer_id": str(farmer.id), "product_ids": [], "transaction_image": PROOF},
            headers=manager_headers,
        )
        assert response.status_code == 400

    def test_resettle_returns_400(self, client, manager_headers, make_farmer, make_product):
        farmer = make_farmer()
        product = make_product(farmer)
        body = {
            "farmer_id": str(farmer.id),
            "product_ids": [str(product.id)],
            "transaction_image": PROOF,
        }
        first = client.post("/v1/settlements/", json=body, headers=manager_headers)
        assert first.status_code == 201
        again = client.post("/v1/settlements/", json=body, headers=manager_headers)
        assert again.status_code == 400
        assert "already settled" in again.json()["detail"]

    def test_persistence_failure_returns_500(
        self, client, manager_headers, db_session, make_farmer, make_product
    ):
        """A failed write reports which item failed and that none were settled."""
        farmer = make_farmer()
        product = make_product(farmer, name="Okra")

        with patch.object(
            FarmerProductRepository, "mark_settled", side_effect=SQLAlchemyError("locked")
        ):
            response = client.post(
                "/v1/settlements/",
                json={
                    "farmer_id": str(farmer.id),
                    "product_ids": [str(product.id)],
                    "transaction_image": PROOF,
                },
                headers=manager_headers,
            )

        assert response.status_code == 500
        detail = response.json()["detail"]
        assert detail["failed_product_ids"] == [str(product.id)]
        assert detail["settled_product_ids"] == []
        assert "Okra" in detail["message"]
        db_session.expire_all()
        assert product.payment_status == PaymentStatus.UNSETTLED.value

    def test_requires_token(self, client, make_farmer):
        farmer = make_farmer()
        response = client.post(
            "/v1/settlements/",
            json={"farmer_id": str(farmer.id), "transaction_image": PROOF},
        )
        assert response.status_code == 401

    def test_sales_role_cannot_settle(self, client, sales_headers, make_farmer, make_product):
        farmer = make_farmer()
        make_product(farmer)
        response = client.post(
            "/v1/settlements/",
            json={"farmer_id": str(farmer.id), "transaction_image": PROOF},
            headers=sales_headers,
        )
        assert response.status_code == 403

    def test_farmer_outside_branch_returns_403(
        self, client, manager_headers, make_farmer, make_product
    ):
        farmer = make_farmer(branch_id=None)
        make_product(farmer)
        response = client.post(
            "/v1/settlements/",
            json={"farmer_id": str(farmer.id), "transaction_image": PROOF},
            headers=manager_headers,
        )
        assert response.status_code == 403

    def test_unknown_farmer_returns_404(self, client, admin_headers):
        response = client.post(
            "/v1/settlements/",
            json={"farmer_id": str(uuid.uuid4()), "transaction_image": PROOF},
            headers=admin_headers,
        )
        assert response.status_code == 404


class TestSettleSingleProduct:
    def test_settle_one_product(self, client, manager_headers, make_farmer, make_product):
        """Tomatoes 10 kg at 20 settle for 200.00."""
        farmer = make_farmer()
        tomatoes = make_product(farmer, name="Tomatoes", quantity="10", price_per_unit="20")

        response = client.post(
            f"/v1/farmer_products/{tomatoes.id}/settle",
            json={"transaction_image": PROOF},
            headers=manager_headers,
        )

        assert response.status_code == 201
        assert Decimal(response.json()["settled_amount"]) == Decimal("200.00")

        product = client.get(f"/v1/farmer_products/{tomatoes.id}", headers=manager_headers).json()
        assert product["payment_status"] == "settled"
        assert product["transaction_image"] == PROOF
        assert product["settlement_id"] == response.json()["id"]

    def test_missing_proof(self, client, manager_headers, make_farmer, make_product):
        farmer = make_farmer()
        product = make_product(farmer)
        response = client.post(
            f"/v1/farmer_products/{product.id}/settle",
            json={"transaction_image": "  "},
            headers=manager_headers,
        )
        assert response.status_code == 400


class TestPreview:
    def test_preview(self, client, manager_headers, db_session, make_farmer, make_product):
        farmer = make_farmer()
        p1 = make_product(farmer, quantity="2", price_per_unit="45.50")

        response = client.post(
            "/v1/settlements/preview",
            json={"farmer_id": str(farmer.id), "product_ids": [str(p1.id)]},
            headers=manager_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["total_amount"]) == Decimal("91.00")
        assert data["farmer"]["id"] == str(farmer.id)
        assert [i["id"] for i in data["items"]] == [str(p1.id)]
        assert db_session.query(Settlement).count() == 0

    def test_preview_unknown_product(self, client, manager_headers, make_farmer):
        farmer = make_farmer()
        response = client.post(
            "/v1/settlements/preview",
            json={"farmer_id": str(farmer.id), "product_ids": [str(uuid.uuid4())]},
            headers=manager_headers,
        )
        assert response.status_code == 400


class TestReadSettlements:
    def _settle(self, client, headers, farmer, products, proof=PROOF):
        response = client.post(
            "/v1/settlements/",
            json={
                "farmer_id": str(farmer.id),
                "product_ids": [str(p.id) for p in products],
                "transaction_image": proof,
            },
            headers=headers,
        )
        assert response.status_code == 201
        return response.json()

    def test_list_and_get_with_snapshots(self, client, manager_headers, make_farmer, make_product):
        farmer = make_farmer()
        p1 = make_product(farmer, name="Okra", quantity="1", price_per_unit="100")
        p2 = make_product(farmer, name="Beans", quantity="1", price_per_unit="150")
        created = self._settle(client, manager_headers, farmer, [p1, p2])

        listing = client.get(
            "/v1/settlements/", params={"farmer_id": str(farmer.id)}, headers=manager_headers
        )
        assert listing.status_code == 200
        assert listing.headers["X-Total-Count"] == "1"
        assert listing.json()[0]["id"] == created["id"]

        detail = client.get(f"/v1/settlements/{created['id']}", headers=manager_headers)
        assert detail.status_code == 200
        snapshots = detail.json()["products"]
        assert sorted(s["product_name"] for s in snapshots) == ["Beans", "Okra"]
        total = sum(Decimal(s["total_amount"]) for s in snapshots)
        assert total == Decimal(detail.json()["settled_amount"])

    def test_get_unknown_settlement(self, client, admin_headers):
        response = client.get(f"/v1/settlements/{uuid.uuid4()}", headers=admin_headers)
        assert response.status_code == 404

    def test_batches(self, client, manager_headers, make_farmer, make_product):
        farmer = make_farmer()
        p1 = make_product(farmer, name="A")
        p2 = make_product(farmer, name="B")
        p3 = make_product(farmer, name="C")
        first = self._settle(client, manager_headers, farmer, [p1, p2], proof="one.png")
        self._settle(client, manager_headers, farmer, [p3], proof="two.png")

        response = client.get(
            f"/v1/settlements/farmers/{farmer.id}/batches", headers=manager_headers
        )

        assert response.status_code == 200
        batches = {b["key"]: b for b in response.json()}
        assert len(batches) == 2
        assert batches[first["id"]]["product_count"] == 2
        assert batches[first["id"]]["transaction_image"] == "one.png"

    def test_daily_history(self, client, manager_headers, make_farmer, make_product):
        farmer = make_farmer()
        make_product(farmer, name="Unpaid")
        paid = make_product(farmer, name="Paid")
        self._settle(client, manager_headers, farmer, [paid])

        response = client.get(
            f"/v1/settlements/farmers/{farmer.id}/daily", headers=manager_headers
        )

        assert response.status_code == 200
        days = response.json()
        assert len(days) == 1
        assert [p["name"] for p in days[0]["products"]] == ["Paid"]
        assert days[0]["settlement_receipt"] == PROOF

    def test_daily_history_empty(self, client, manager_headers, make_farmer):
        farmer = make_farmer()
        response = client.get(
            f"/v1/settlements/farmers/{farmer.id}/daily", headers=manager_headers
        )
        assert response.json() == []

    def test_monthly_summary_merges_rows(self, client, manager_headers, make_farmer, make_product):
        farmer = make_farmer()
        make_product(farmer, name="Tomatoes", quantity="5", price_per_unit="20")
        make_product(farmer, name="Tomatoes", quantity="3", price_per_unit="20")

        response = client.get(
            f"/v1/settlements/farmers/{farmer.id}/monthly", headers=manager_headers
        )

        assert response.status_code == 200
        months = response.json()
        assert len(months) == 1
        assert len(months[0]["rows"]) == 1
        row = months[0]["rows"][0]
        assert row["count"] == 2
        assert Decimal(row["amount"]) == Decimal("160.00")
        assert Decimal(months[0]["unsettled_amount"]) == Decimal("160.00")

    def test_summaries_largest_balance_first(
        self, client, manager_headers, make_farmer, make_product
    ):
        small = make_farmer(name="Small Holder", phone="9000000001")
        large = make_farmer(name="Large Estate", phone="9000000002")
        make_product(small, quantity="1", price_per_unit="10")
        make_product(large, quantity="1", price_per_unit="900")

        response = client.get("/v1/settlements/summaries", headers=manager_headers)

        assert response.status_code == 200
        names = [s["farmer"]["name"] for s in response.json()]
        assert names == ["Large Estate", "Small Holder"]

    def test_summaries_search_and_outstanding_filter(
        self, client, manager_headers, make_farmer, make_product
    ):
        owed = make_farmer(name="Owed Farmer", phone="9000000003")
        paid = make_farmer(name="Paid Farmer", phone="9000000004")
        make_product(owed)
        settled = make_product(paid)
        self._settle(client, manager_headers, paid, [settled])

        outstanding = client.get(
            "/v1/settlements/summaries",
            params={"outstanding_only": True},
            headers=manager_headers,
        ).json()
        assert [s["farmer"]["name"] for s in outstanding] == ["Owed Farmer"]

        searched = client.get(
            "/v1/settlements/summaries", params={"search": "paid"}, headers=manager_headers
        ).json()
        assert [s["farmer"]["name"] for s in searched] == ["Paid Farmer"]


class TestFarmerCallerScope:
    def test_farmer_sees_only_own_settlements(
        self, client, manager_headers, farmer_headers_for, make_farmer, make_product
    ):
        me = make_farmer(name="Me", phone="9000000005")
        other = make_farmer(name="Other", phone="9000000006")
        for farmer in (me, other):
            product = make_product(farmer)
            client.post(
                "/v1/settlements/",
                json={
                    "farmer_id": str(farmer.id),
                    "product_ids": [str(product.id)],
                    "transaction_image": PROOF,
                },
                headers=manager_headers,
            )

        headers = farmer_headers_for(me.id)
        response = client.get("/v1/settlements/", headers=headers)
        assert response.status_code == 200
        assert {s["farmer_id"] for s in response.json()} == {str(me.id)}

        denied = client.get(f"/v1/settlements/farmers/{other.id}/daily", headers=headers)
        assert denied.status_code == 403

    def test_farmer_cannot_settle(self, client, farmer_headers_for, make_farmer, make_product):
        me = make_farmer()
        make_product(me)
        response = client.post(
            "/v1/settlements/",
            json={"farmer_id": str(me.id), "transaction_image": PROOF},
            headers=farmer_headers_for(me.id),
        )
        assert response.status_code == 403
