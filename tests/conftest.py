"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from listing_cashflow.main import app
from listing_cashflow.db.database import get_db
from listing_cashflow.db.models import Base
from listing_cashflow.calculations.cashflow import CashflowInputs


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "integration: marks integration tests")


# Create a shared test database engine
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db():
    """Override database dependency for testing."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


# Override the dependency globally for all tests
app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test and drop after."""
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db_session():
    """Create database session for test setup."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def rental_inputs():
    """A typical insured rental purchase."""
    return CashflowInputs(
        purchase_price=500000,
        down_payment=50000,
        interest_rate=5.5,
        loan_term=25,
        monthly_rent=2500,
        property_taxes=350,
        insurance=120,
        property_management=8,
        maintenance_reserve=7,
        vacancy=6,
        cap_ex_reserve=5,
        hoa_fees=0,
        other_expenses=50,
    )


@pytest.fixture
def test_session_local(monkeypatch):
    """Point sessions opened outside FastAPI at the test database."""
    from listing_cashflow.db import database

    monkeypatch.setattr(database, "SessionLocal", TestingSessionLocal)
    return TestingSessionLocal
