"""
Test configuration and fixtures for the insurance records backend tests.
"""

import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("APP_ENV", "development")

import pytest
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from main import app
from app.core.config import settings
from app.db.base import Base
from app.db.session import get_db
from app.db.models import InsuranceProvider, InsuranceReceipient, DoctorDetails, InsuranceDetails


# Use in-memory SQLite for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database override."""
    app.dependency_overrides[get_db] = lambda: db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    """Point logo uploads at a temporary directory."""
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path))
    return tmp_path


@pytest.fixture
def test_provider(db: Session):
    """Create a non-default insurance provider."""
    provider = InsuranceProvider(
        provider_name="Keystone Health Plan",
        phone_no_1="800-555-0142",
        provider_code="KHP",
        is_default=False,
    )
    db.add(provider)
    db.commit()
    db.refresh(provider)
    return provider


@pytest.fixture
def default_provider(db: Session):
    """Create the default insurance provider."""
    provider = InsuranceProvider(
        provider_name="Medical Assistance",
        phone_no_1="800-555-0100",
        provider_code="MA",
        is_default=True,
    )
    db.add(provider)
    db.commit()
    db.refresh(provider)
    return provider


@pytest.fixture
def test_recipient(db: Session):
    """Create a test recipient."""
    recipient = InsuranceReceipient(name="Alex Morgan", receipient_ma="1000234567")
    db.add(recipient)
    db.commit()
    db.refresh(recipient)
    return recipient


@pytest.fixture
def other_recipient(db: Session):
    """Create a second recipient."""
    recipient = InsuranceReceipient(name="Jordan Lee", receipient_ma="1000987654")
    db.add(recipient)
    db.commit()
    db.refresh(recipient)
    return recipient


@pytest.fixture
def test_doctor(db: Session):
    """Create a test doctor."""
    doctor = DoctorDetails(doctor_name="Dr. Priya Shah", doctor_phone_no="215-555-0190")
    db.add(doctor)
    db.commit()
    db.refresh(doctor)
    return doctor


@pytest.fixture
def make_details(db: Session, test_provider, test_doctor):
    """Factory inserting insurance details rows directly."""
    def _make(recipient, from_service_date, to_service_date, is_active=True, provider=None, **extra):
        details = InsuranceDetails(
            provider_id=(provider or test_provider).id,
            recipient_id=recipient.id,
            doctor_id=test_doctor.id,
            from_service_date=from_service_date,
            to_service_date=to_service_date,
            is_active=is_active,
            **extra,
        )
        db.add(details)
        db.commit()
        db.refresh(details)
        return details
    return _make


@pytest.fixture
def details_payload(test_provider, test_recipient, test_doctor) -> dict:
    """Request body for creating insurance details."""
    return {
        "provider_id": test_provider.id,
        "recipient_id": test_recipient.id,
        "doctor_id": test_doctor.id,
        "prsrb_prov": "Dr. Priya Shah",
        "pa": "PA-2024-0001",
        "from_service_date": "2024-01-01",
        "to_service_date": "2024-06-30",
        "procedure_code": "W1726",
        "units": "999",
        "procedure_val": "120",
        "number_of_days": 5,
        "max_per_day": 8,
        "max_per_day_unit": "units",
        "insurance_status": "approved",
    }
