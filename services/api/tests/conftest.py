import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from larder.main import app
from larder.db import Base, get_db
from larder.models import Unit, Ingredient
from larder.services.catalog_seed import seed_catalog

# --- Test Database Setup ---

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

# Note: check_same_thread is needed for SQLite; StaticPool shares the
# single in-memory connection between the app and the fixtures.
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    """Test client with DB override."""
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def db_session():
    """Direct database session for setup."""
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def seeded(db_session):
    """Standard unit catalog, categories and sample ingredients."""
    return seed_catalog(db_session)


@pytest.fixture
def unit_id(db_session):
    """Look up a unit id by name (and system, for names used in both)."""
    def _lookup(name, system=None):
        stmt = select(Unit.id).where(Unit.name == name)
        if system:
            stmt = stmt.where(Unit.system == system)
        return db_session.execute(stmt).scalars().first()
    return _lookup


@pytest.fixture
def ingredient_id(db_session):
    def _lookup(name):
        return db_session.execute(
            select(Ingredient.id).where(Ingredient.name == name)
        ).scalar_one()
    return _lookup
