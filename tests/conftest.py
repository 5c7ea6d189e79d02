"""
Shared test fixtures — SQLite database, test client, rate snapshot.
"""

import os
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Point the app at the test database before importing app modules
os.environ["DATABASE_URL"] = "sqlite:///./test.db"

from stonequote.database import Base, get_db
from stonequote.main import app
from stonequote.models import PricingBasis
from stonequote.schemas import RateConfig, EdgeProfile, CutoutType, MaterialCatalogEntry


TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    """FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def db():
    """Direct database session for test setup/assertions."""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def rates():
    """A complete rate snapshot: every service priced, a few edges and cutouts."""
    return RateConfig(
        cutting_rate=17.50,
        polishing_rate=45.00,
        installation_rate=140.00,
        lamination_rate=70.00,
        join_rate=85.00,
        edge_profiles={
            "pencil_round": EdgeProfile(id="pencil_round", name="Pencil Round", base_rate=18.00),
            "bullnose": EdgeProfile(id="bullnose", name="Bullnose", base_rate=55.00),
            "curved": EdgeProfile(id="curved", name="Curved Finished Edge", base_rate=300.00,
                                  minimum_charge=300.00),
        },
        cutout_types={
            "undermount_sink": CutoutType(id="undermount_sink", name="Undermount Sink", base_rate=300.00),
            "tap_hole": CutoutType(id="tap_hole", name="Tap Hole", base_rate=65.00),
            "gpo": CutoutType(id="gpo", name="GPO", base_rate=20.00, minimum_charge=50.00),
        },
    )


@pytest.fixture
def quartz():
    """Per-m² engineered stone on a 3340 x 1640 jumbo slab (3300 x 1600 workable), 10% waste."""
    return MaterialCatalogEntry(
        id="quartz", name="Caesarstone Pure White", category="caesarstone",
        pricing_basis=PricingBasis.PER_SQM, price_per_sqm=450.00, waste_factor_percent=10.0,
        slab_length_mm=3340, slab_width_mm=1640,
    )


@pytest.fixture
def marble():
    """Per-slab natural stone on a 3200 x 1600 slab (3160 x 1560 workable)."""
    return MaterialCatalogEntry(
        id="marble", name="Calacatta Marble", category="marble",
        pricing_basis=PricingBasis.PER_SLAB, price_per_slab=1000.00,
        slab_length_mm=3200, slab_width_mm=1600,
    )
