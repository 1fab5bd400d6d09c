"""
Shared fixtures.

The application reads its settings at import time, so the database URL and
lock backend are pinned here before anything from appointly is imported.
Every test gets a fresh in-memory SQLite schema.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BOOKING_LOCK_BACKEND"] = "local"
os.environ["SLOT_GRANULARITY_MINUTES"] = "30"
os.environ["JWT_SECRET_KEY"] = "test-secret"

from datetime import date, datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from appointly.api.dependencies import create_access_token, get_clock  # noqa: E402
from appointly.config.database import SessionLocal, create_tables, drop_tables, get_db  # noqa: E402
from appointly.main import app  # noqa: E402
from appointly.models import Business, EventType, Service, StaffRole, User  # noqa: E402
from appointly.repositories.working_hours_repository import WorkingHoursRepository  # noqa: E402

# 2030-06-03 is a Monday (weekday index 1); the default schedule opens it 09:00-17:00
MONDAY = date(2030, 6, 3)
SUNDAY = date(2030, 6, 2)
FIXED_NOW = datetime(2030, 6, 1, 8, 0)


@pytest.fixture
def db():
    """Session on a freshly created schema."""
    create_tables()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        drop_tables()


@pytest.fixture
def business(db):
    business = Business(name="Sunset Physiotherapy", slug="sunset-physio", buffer_before=0, buffer_after=0)
    db.add(business)
    db.commit()
    return business


@pytest.fixture
def staff(db, business):
    user = User(
        business_id=business.id,
        email="owner@sunset.example",
        name="Owner",
        role=StaffRole.OWNER,
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def service(db, business):
    service = Service(business_id=business.id, name="Assessment", duration=30)
    db.add(service)
    db.commit()
    return service


@pytest.fixture
def event_type(db, business, staff):
    event_type = EventType(
        business_id=business.id,
        creator_id=staff.id,
        title="Intro Call",
        slug="intro-call",
        duration=30,
        buffer_before=5,
        buffer_after=5,
        minimum_notice=0,
        requires_confirmation=False,
    )
    db.add(event_type)
    db.commit()
    return event_type


@pytest.fixture
def working_hours(db, business):
    rows = WorkingHoursRepository(db).create_defaults(business.id)
    db.commit()
    return rows


@pytest.fixture
def other_business(db):
    """A second tenant with its own staff member and service."""
    business = Business(name="Elsewhere Dental", slug="elsewhere-dental")
    db.add(business)
    db.flush()
    user = User(business_id=business.id, email="dentist@elsewhere.example", name="Dentist")
    service = Service(business_id=business.id, name="Cleaning", duration=45)
    db.add_all([user, service])
    db.commit()
    return business, user, service


@pytest.fixture
def client(db):
    """TestClient sharing the test session and a fixed clock."""
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_clock] = lambda: (lambda: FIXED_NOW)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(staff):
    token = create_access_token({"sub": str(staff.id)})
    return {"Authorization": f"Bearer {token}"}
