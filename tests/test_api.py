"""
Tests for calculation and saved calculation API endpoints.
"""

import pytest
from datetime import datetime
from io import BytesIO
from fastapi.testclient import TestClient
from openpyxl import load_workbook

from listing_cashflow.calculations.cashflow import CashflowInputs, calculate_cashflow
from listing_cashflow.db.database import get_db_context
from listing_cashflow.db.models import SavedCalculation
from listing_cashflow import main

# Database setup and client fixture are handled by conftest.py


RENTAL_INPUTS = {
    "purchasePrice": 500000,
    "downPayment": 50000,
    "interestRate": 5.5,
    "loanTerm": 25,
    "monthlyRent": 2500,
    "propertyTaxes": 350,
    "insurance": 120,
    "propertyManagement": 8,
    "maintenanceReserve": 7,
    "vacancy": 6,
    "capExReserve": 5,
    "hoaFees": 0,
    "otherExpenses": 50,
}


@pytest.fixture
def saved_calculation(client):
    """Save a calculation through the API."""
    response = client.post(
        "/api/calculations/",
        json={
            "name": "123 Maple St",
            "address": "123 Maple St, Toronto, ON",
            "listingUrl": "https://example.com/listing/123",
            "inputs": RENTAL_INPUTS,
        },
    )
    assert response.status_code == 201
    return response.json()


# ============================================================================
# CALCULATION API TESTS
# ============================================================================

class TestCalculationAPI:
    """Test calculation endpoints."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_calculate_cashflow(self, client):
        """Cash flow response uses camelCase fields."""
        response = client.post("/api/calculate/cashflow", json=RENTAL_INPUTS)
        assert response.status_code == 200
        data = response.json()
        assert data["cmhcRate"] == 3.1
        assert data["cmhcPremium"] == pytest.approx(13950)
        assert data["totalMortgageAmount"] == pytest.approx(463950)
        assert data["monthlyIncome"] == 2500
        assert data["capRate"] == pytest.approx(3.19)
        assert data["totalCashRequired"] == 50000

    def test_calculate_cashflow_snake_case(self, client):
        """Field names are also accepted in snake_case."""
        response = client.post(
            "/api/calculate/cashflow",
            json={
                "purchase_price": 500000,
                "down_payment": 100000,
                "interest_rate": 5.5,
                "loan_term": 25,
            },
        )
        assert response.status_code == 200
        assert response.json()["monthlyMortgage"] == pytest.approx(2454.76, abs=0.01)

    def test_calculate_cashflow_rejects_negative_price(self, client):
        response = client.post(
            "/api/calculate/cashflow",
            json={**RENTAL_INPUTS, "purchasePrice": -1},
        )
        assert response.status_code == 422

    def test_calculate_cashflow_rejects_zero_term(self, client):
        response = client.post(
            "/api/calculate/cashflow",
            json={**RENTAL_INPUTS, "loanTerm": 0},
        )
        assert response.status_code == 422

    def test_mortgage_payment(self, client):
        response = client.post(
            "/api/calculate/mortgage-payment",
            json={"principal": 400000, "annualRatePercent": 5.5, "termYears": 25},
        )
        assert response.status_code == 200
        assert response.json()["monthlyPayment"] == pytest.approx(2454.76, abs=0.01)

    def test_cmhc(self, client):
        response = client.post(
            "/api/calculate/cmhc",
            json={"loanAmount": 450000, "purchasePrice": 500000},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["rate"] == 3.1
        assert data["loanToValue"] == pytest.approx(90)
        assert data["totalMortgageAmount"] == pytest.approx(463950)

    def test_down_payment_minimum(self, client):
        response = client.post(
            "/api/calculate/down-payment", json={"purchasePrice": 750000}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["minimumDownPayment"] == 50000
        assert data["minimumPercentage"] == pytest.approx(6.67)
        assert data["meetsMinimum"] is None

    def test_down_payment_from_percentage(self, client):
        """A percentage is converted and checked against the minimum."""
        response = client.post(
            "/api/calculate/down-payment",
            json={"purchasePrice": 750000, "percentage": 5},
        )
        data = response.json()
        assert data["amount"] == 37500
        assert data["meetsMinimum"] is False
        assert data["shortfall"] == 12500

    def test_down_payment_from_amount(self, client):
        response = client.post(
            "/api/calculate/down-payment",
            json={"purchasePrice": 400000, "amount": 80000},
        )
        data = response.json()
        assert data["percentage"] == 20
        assert data["meetsMinimum"] is True
        assert data["shortfall"] == 0

    def test_amortization(self, client):
        response = client.post(
            "/api/calculate/amortization",
            json={
                "principal": 100000,
                "annualRatePercent": 6,
                "termYears": 5,
                "startDate": "2025-01-01",
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert len(data["schedule"]) == 60
        assert data["totalPrincipal"] == pytest.approx(100000, abs=1)

    def test_from_listing(self, client):
        """Listing estimates fill the inputs; gaps use defaults."""
        response = client.post(
            "/api/calculate/from-listing",
            json={
                "listing": {
                    "price": 400000,
                    "address": "42 Oak Ave",
                    "propertyType": "Condo",
                    "monthlyRent": 2200,
                    "propertyTax": 300,
                }
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["inputs"]["downPayment"] == 20000
        assert data["inputs"]["interestRate"] == 5.5
        assert data["inputs"]["propertyTaxes"] == 300
        assert data["inputs"]["insurance"] == 0
        assert data["results"]["cmhcRate"] == 4.0
        assert data["warnings"] == []

    def test_from_listing_warnings(self, client):
        response = client.post(
            "/api/calculate/from-listing",
            json={"listing": {"price": 400000}, "downPayment": 10000},
        )
        data = response.json()
        assert len(data["warnings"]) == 2
        assert data["results"]["monthlyIncome"] == 0


# ============================================================================
# SAVED CALCULATION API TESTS
# ============================================================================

class TestSavedCalculationAPI:
    """Test saved calculation endpoints."""

    def test_save_computes_results(self, saved_calculation):
        """Results are calculated when not supplied."""
        assert saved_calculation["results"]["cmhcPremium"] == pytest.approx(13950)
        assert saved_calculation["inputs"]["monthlyRent"] == 2500
        assert saved_calculation["savedAt"] is not None

    def test_save_keeps_supplied_results(self, client):
        """Supplied results are stored verbatim."""
        calculated = client.post("/api/calculate/cashflow", json=RENTAL_INPUTS).json()
        response = client.post(
            "/api/calculations/",
            json={"name": "Verbatim", "inputs": RENTAL_INPUTS, "results": calculated},
        )
        assert response.status_code == 201
        assert response.json()["results"] == calculated

    def test_list_calculations(self, client, saved_calculation):
        response = client.get("/api/calculations/")
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["calculations"][0]["id"] == saved_calculation["id"]

    def test_get_calculation(self, client, saved_calculation):
        response = client.get(f"/api/calculations/{saved_calculation['id']}")
        assert response.status_code == 200
        assert response.json()["listingUrl"] == "https://example.com/listing/123"

    def test_get_calculation_not_found(self, client):
        response = client.get("/api/calculations/nonexistent-id")
        assert response.status_code == 404

    def test_update_details(self, client, saved_calculation):
        """Updating details leaves the results alone."""
        response = client.put(
            f"/api/calculations/{saved_calculation['id']}",
            json={"name": "Renamed", "notes": "Needs a new roof"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Renamed"
        assert data["notes"] == "Needs a new roof"
        assert data["results"] == saved_calculation["results"]

    def test_update_inputs_recalculates(self, client, saved_calculation):
        response = client.put(
            f"/api/calculations/{saved_calculation['id']}",
            json={"inputs": {**RENTAL_INPUTS, "downPayment": 100000}},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["results"]["cmhcPremium"] == 0
        assert data["results"]["totalMortgageAmount"] == 400000

    def test_delete_calculation(self, client, saved_calculation, db_session):
        """Delete is soft: the row stays but is hidden."""
        calc_id = saved_calculation["id"]
        response = client.delete(f"/api/calculations/{calc_id}")
        assert response.status_code == 200
        assert response.json()["deleted"] is True

        assert client.get(f"/api/calculations/{calc_id}").status_code == 404
        assert client.get("/api/calculations/").json()["total"] == 0

        row = db_session.query(SavedCalculation).filter_by(id=calc_id).first()
        assert row is not None
        assert row.is_deleted is True

    def test_export_empty(self, client):
        response = client.get("/api/calculations/export")
        assert response.status_code == 400

    def test_export(self, client, saved_calculation):
        response = client.get("/api/calculations/export")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith(
            "application/vnd.openxmlformats"
        )
        assert "Property_Analysis_" in response.headers["content-disposition"]

        workbook = load_workbook(BytesIO(response.content))
        assert workbook.sheetnames == ["Summary", "123 Maple St"]
        assert workbook["Summary"]["A6"].value == "123 Maple St"

    def test_update_rejects_null_name(self, client, saved_calculation):
        """A null name is a validation error, not a database failure."""
        response = client.put(
            f"/api/calculations/{saved_calculation['id']}",
            json={"name": None},
        )
        assert response.status_code == 422

        unchanged = client.get(f"/api/calculations/{saved_calculation['id']}").json()
        assert unchanged["name"] == "123 Maple St"

    def test_update_clears_nullable_fields(self, client, saved_calculation):
        """Explicit nulls clear optional details."""
        response = client.put(
            f"/api/calculations/{saved_calculation['id']}",
            json={"address": None},
        )
        assert response.status_code == 200
        assert response.json()["address"] is None
        assert response.json()["name"] == "123 Maple St"


def add_saved_calculation(db, name, created_at):
    """Insert a saved calculation with a fixed timestamp."""
    inputs = CashflowInputs(
        purchase_price=400000,
        down_payment=80000,
        interest_rate=5.0,
        loan_term=25,
        monthly_rent=2100,
    )
    calc = SavedCalculation(
        name=name,
        inputs=inputs.to_dict(),
        results=calculate_cashflow(inputs).to_dict(),
        created_at=created_at,
    )
    db.add(calc)
    db.commit()
    return calc


class TestSavedCalculationListing:
    """Test ordering and pagination of saved calculations."""

    @pytest.fixture
    def three_calculations(self, db_session):
        add_saved_calculation(db_session, "Oldest", datetime(2025, 1, 1, 9, 0))
        add_saved_calculation(db_session, "Newest", datetime(2025, 3, 1, 9, 0))
        add_saved_calculation(db_session, "Middle", datetime(2025, 2, 1, 9, 0))

    def test_newest_first(self, client, three_calculations):
        data = client.get("/api/calculations/").json()
        assert data["total"] == 3
        assert [c["name"] for c in data["calculations"]] == ["Newest", "Middle", "Oldest"]

    def test_skip_and_limit(self, client, three_calculations):
        """Total counts every row; the page is sliced."""
        data = client.get("/api/calculations/?skip=1&limit=1").json()
        assert data["total"] == 3
        assert [c["name"] for c in data["calculations"]] == ["Middle"]

        data = client.get("/api/calculations/?skip=2&limit=5").json()
        assert [c["name"] for c in data["calculations"]] == ["Oldest"]


class TestDatabaseContext:
    """Test the session context manager used outside FastAPI."""

    def test_commits_on_success(self, test_session_local, db_session):
        with get_db_context() as db:
            db.add(
                SavedCalculation(
                    name="Committed",
                    inputs={},
                    results={},
                    created_at=datetime(2025, 1, 1),
                )
            )

        assert db_session.query(SavedCalculation).filter_by(name="Committed").count() == 1

    def test_rolls_back_and_reraises(self, test_session_local, db_session):
        with pytest.raises(RuntimeError, match="seed failed"):
            with get_db_context() as db:
                db.add(
                    SavedCalculation(
                        name="Rolled Back",
                        inputs={},
                        results={},
                        created_at=datetime(2025, 1, 1),
                    )
                )
                db.flush()
                raise RuntimeError("seed failed")

        assert db_session.query(SavedCalculation).filter_by(name="Rolled Back").count() == 0


class TestLifespan:
    """Test application startup."""

    def test_startup_initializes_database(self, monkeypatch):
        calls = []
        monkeypatch.setattr(main, "init_db", lambda: calls.append(True))

        with TestClient(main.app) as client:
            assert client.get("/health").status_code == 200

        assert calls == [True]
