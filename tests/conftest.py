"""Pytest configuration and fixtures."""

from collections.abc import Generator
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine, StaticPool, create_engine

from clinicdesk.api.deps import get_store
from clinicdesk.db.init_db import drop_tables, init_db
from clinicdesk.main import app
from clinicdesk.schemas.patient import Patient
from clinicdesk.services.appointments import AppointmentService
from clinicdesk.services.medical_records import MedicalRecordService
from clinicdesk.services.patients import PatientService
from clinicdesk.services.snapshot import SnapshotService
from clinicdesk.services.store import DocumentStore
from tests.factories import make_patient_data


# In-memory SQLite shared across threads (TestClient runs sync routes in a pool)
TEST_DATABASE_URL = "sqlite:///:memory:"

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Clock returning a fixed time that tests can move forward."""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: Any) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture(scope="function")
def engine() -> Generator[Engine, None, None]:
    """Create test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    init_db(engine)

    yield engine

    drop_tables(engine)
    engine.dispose()


@pytest.fixture
def store(engine: Engine) -> DocumentStore:
    """Fresh document store per test."""
    return DocumentStore.from_engine(engine)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def patient_service(store: DocumentStore, clock: FrozenClock) -> PatientService:
    return PatientService(
        store,
        clock=clock,
        cascade_delete=False,
        agreement_text="I agree to the treatment.",
    )


@pytest.fixture
def record_service(store: DocumentStore, clock: FrozenClock) -> MedicalRecordService:
    return MedicalRecordService(store, clock=clock, enforce_references=True, default_provider="")


@pytest.fixture
def appointment_service(store: DocumentStore, clock: FrozenClock) -> AppointmentService:
    return AppointmentService(store, clock=clock, enforce_references=True)


@pytest.fixture
def snapshot_service(store: DocumentStore) -> SnapshotService:
    return SnapshotService(store)


@pytest.fixture(scope="function")
def client(store: DocumentStore) -> Generator[TestClient, None, None]:
    """Create FastAPI test client with overridden dependencies."""
    app.dependency_overrides[get_store] = lambda: store

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def patient(patient_service: PatientService) -> Patient:
    """A registered patient (id 2024-001)."""
    result = patient_service.create(make_patient_data())
    assert result.success, result.message
    return result.value
