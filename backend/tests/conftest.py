"""Shared test fixtures for all test modules."""

import contextlib
import uuid
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core import database as db_module
from app.core.auth import CallerContext, create_access_token
from app.core.database import Base, get_db
from app.main import app
from app.models.branch import Branch
from app.models.farmer import Farmer
from app.models.farmer_product import FarmerProduct, PaymentStatus

# Create an in-memory SQLite engine with StaticPool so all connections
# share the same database state and there are no file-locking issues.
_test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
_TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_test_engine)

# Well-known default branch ID used across all tests
DEFAULT_BRANCH_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")


def _seed_default_branch(session: Session) -> None:
    """Insert a default branch used by all tests."""
    branch = session.query(Branch).filter(Branch.id == DEFAULT_BRANCH_ID).first()
    if branch is None:
        branch = Branch(id=DEFAULT_BRANCH_ID, name="Main Branch", code="MAIN")
        session.add(branch)
        session.commit()


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test and truncate all data after.

    Patches the module-level engine and SessionLocal so all application code
    uses the in-memory test database. Clears data after each test.
    """
    original_engine = db_module.engine
    original_session = db_module.SessionLocal
    db_module.engine = _test_engine
    db_module.SessionLocal = _TestSessionLocal

    Base.metadata.create_all(bind=_test_engine)

    session = _TestSessionLocal()
    try:
        _seed_default_branch(session)
    finally:
        session.close()

    yield
    with _test_engine.connect() as conn:
        conn.execute(text("PRAGMA foreign_keys = OFF"))
        for table in reversed(Base.metadata.sorted_tables):
            with contextlib.suppress(OperationalError):
                conn.execute(table.delete())
        conn.execute(text("PRAGMA foreign_keys = ON"))
        conn.commit()

    db_module.engine = original_engine
    db_module.SessionLocal = original_session


@pytest.fixture
def default_branch_id():
    """Return the default branch ID for tests."""
    return DEFAULT_BRANCH_ID


@pytest.fixture
def db_session():
    """Create a database session for direct testing."""
    gen = get_db()
    db = next(gen)
    try:
        yield db
    finally:
        for _ in gen:
            pass


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


def _bearer(context: CallerContext) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(context)}"}


@pytest.fixture
def admin_headers():
    return _bearer(CallerContext(role="admin", user_id="admin-1"))


@pytest.fixture
def manager_headers():
    """A manager assigned to the default branch only."""
    return _bearer(
        CallerContext(role="manager", user_id="manager-1", branch_ids=(DEFAULT_BRANCH_ID,))
    )


@pytest.fixture
def sales_headers():
    return _bearer(
        CallerContext(role="sales", user_id="sales-1", branch_ids=(DEFAULT_BRANCH_ID,))
    )


@pytest.fixture
def farmer_headers_for():
    """Build headers for a farmer caller scoped to ``farmer_id``."""

    def build(farmer_id: uuid.UUID) -> dict[str, str]:
        return _bearer(
            CallerContext(role="farmer", user_id=f"farmer-{farmer_id}", farmer_id=farmer_id)
        )

    return build


@pytest.fixture
def make_farmer(db_session):
    """Insert a farmer, in the default branch unless told otherwise."""

    def build(name: str = "Ravi Kumar", phone: str = "9876543210", branch_id=DEFAULT_BRANCH_ID):
        farmer = Farmer(name=name, phone=phone, branch_id=branch_id)
        db_session.add(farmer)
        db_session.commit()
        db_session.refresh(farmer)
        return farmer

    return build


@pytest.fixture
def make_product(db_session):
    """Insert a line item for a farmer."""

    def build(
        farmer,
        name: str = "Tomatoes",
        quantity: str = "10",
        price_per_unit: str = "20",
        unit: str = "kg",
        category: str = "Vegetables",
        payment_status: PaymentStatus = PaymentStatus.UNSETTLED,
        transaction_image: str | None = None,
    ):
        product = FarmerProduct(
            farmer_id=farmer.id,
            name=name,
            category=category,
            quantity=Decimal(quantity),
            unit=unit,
            price_per_unit=Decimal(price_per_unit),
            payment_status=payment_status.value,
            transaction_image=transaction_image,
        )
        db_session.add(product)
        db_session.commit()
        db_session.refresh(product)
        return product

    return build
