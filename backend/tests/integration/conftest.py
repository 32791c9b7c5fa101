"""
Shared fixtures for API integration tests

In-memory SQLite database with the catalog seeded with a few materials and
the default printer profile.
"""
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from printquote import models  # noqa: F401  (registers tables on Base)
from printquote.db.base import Base
from printquote.db.session import get_db
from printquote.main import app
from printquote.models.material import MaterialCatalogItem
from printquote.models.printer import PrinterProfile


# Create in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session():
    """Create a fresh, seeded database for each test"""
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    db.add_all([
        MaterialCatalogItem(material_type="PLA", color="White", price_per_kg=Decimal("39.00")),
        MaterialCatalogItem(material_type="PLA", color="Red", price_per_kg=Decimal("49.00")),
        MaterialCatalogItem(
            material_type="PETG", color="Black", price_per_kg=Decimal("30.00"),
            stock_status="out_of_stock", lead_time_days=7,
        ),
        MaterialCatalogItem(
            material_type="ABS", color="Green", price_per_kg=Decimal("50.00"), is_active=False,
        ),
        PrinterProfile(
            code="DEFAULT",
            name="Default FDM printer",
            power_watts=Decimal("270"),
            cost_pln=Decimal("3483.39"),
            lifespan_hours=Decimal("5000"),
            maintenance_rate=Decimal("0.03"),
            active=True,
        ),
    ])
    db.commit()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    """Create a test client with database override"""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def reference_item():
    """67 cm³ PLA White at standard quality: 100 g, 482 min, 20.76 PLN"""
    return {
        "file_name": "bracket.stl",
        "base_volume_cm3": 67.0,
        "material_type": "PLA",
        "color": "White",
        "quality": "standard",
    }
