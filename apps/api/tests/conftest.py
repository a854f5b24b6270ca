"""Pytest configuration and fixtures."""

import os

# Settings are cached on first import, so point them at SQLite before any
# carechain_api module is loaded.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from carechain_api.db.base import Base
from carechain_api.db.session import get_db
from carechain_api.models import MedicalRecord, User

# Use test database URL from environment or default to SQLite in-memory
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")


@pytest.fixture(scope="function")
def engine():
    """
    Create a test database engine with all tables.

    For integration tests, use TEST_DATABASE_URL environment variable
    to point to a real PostgreSQL instance.
    """
    if TEST_DATABASE_URL.startswith("sqlite"):
        # SQLite in-memory for fast unit tests
        engine = create_engine(
            TEST_DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(TEST_DATABASE_URL)

    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def session_factory(engine):
    """Session factory bound to the test engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory) -> Session:
    """Create a test database session."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def _make_user(db: Session, user_id: str, role: str) -> User:
    user = User(
        id=user_id,
        username=user_id,
        email=f"{user_id}@example.com",
        full_name=user_id.replace("-", " ").title(),
        role=role,
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def patient(db: Session) -> User:
    """Patient who owns record r1."""
    return _make_user(db, "patient-A", "patient")


@pytest.fixture
def other_patient(db: Session) -> User:
    """Patient who owns nothing relevant."""
    return _make_user(db, "patient-C", "patient")


@pytest.fixture
def doctor(db: Session) -> User:
    """Doctor receiving shared access."""
    return _make_user(db, "doctor-B", "doctor")


@pytest.fixture
def pharmacy(db: Session) -> User:
    """Dispensing pharmacy."""
    return _make_user(db, "pharmacy-D", "pharmacy")


@pytest.fixture
def insurer(db: Session) -> User:
    """Insurance agent."""
    return _make_user(db, "insurer-E", "insurance")


@pytest.fixture
def record(db: Session, patient: User) -> MedicalRecord:
    """Record r1 owned by patient-A, inserted directly (no ledger entry)."""
    record = MedicalRecord(
        id="r1",
        patient_id=patient.id,
        title="Blood panel",
        description="Routine blood work",
        file_type="application/pdf",
        file_url="/uploads/1-blood-panel.pdf",
        file_size=1024,
        record_type="lab_report",
    )
    db.add(record)
    db.commit()
    return record


@pytest.fixture
def client(session_factory):
    """Test client whose middleware and routes share the test engine."""
    from carechain_api.main import create_app

    app = create_app(session_factory=session_factory)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
