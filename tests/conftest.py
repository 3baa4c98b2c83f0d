"""Pytest fixtures for testing"""

import pytest
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker, Session
from budgetwise.api.main import create_app
from budgetwise.infrastructure.database.models import Base
from budgetwise.infrastructure.database.session import build_engine, get_db
from budgetwise.domain.models import BudgetSnapshot


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = build_engine(TEST_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


def make_snapshot(income, expenses, savings=0, emergency_fund=0) -> BudgetSnapshot:
    return BudgetSnapshot(
        monthly_income=Decimal(str(income)),
        monthly_expenses=Decimal(str(expenses)),
        savings=Decimal(str(savings)),
        emergency_fund=Decimal(str(emergency_fund)),
    )


@pytest.fixture
def sample_snapshot() -> BudgetSnapshot:
    """Income 5000, expenses 3500: disposable income 1500"""
    return make_snapshot(5000, 3500, savings=15000, emergency_fund=7000)


@pytest.fixture
def sample_budget() -> dict:
    """API budget payload matching sample_snapshot"""
    return {
        "monthly_income": 5000,
        "monthly_expenses": 3500,
        "savings": 15000,
        "emergency_fund": 7000,
    }


@pytest.fixture
def snapshot_factory():
    """Build BudgetSnapshots from plain numbers"""
    return make_snapshot
