"""
Test configuration and fixtures.

Provides:
- Fresh database schema per test (SQLite in-memory unless TEST_DATABASE_URL is set)
- Users of each role and a property to book
- HTTPX AsyncClient authenticated with a Bearer session token
"""
import os
import uuid
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Generator

# Settings are read at import time; point them at the test database first
os.environ["DATABASE_URL"] = os.environ.get("TEST_DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ["BOOKING_TIMEZONE"] = "UTC"
os.environ["JWT_SECRET"] = "test-secret"

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.orm import Session

from realty_api.main import app
from realty_api.core.deps import get_db
from realty_api.core.security import create_session_token
from realty_api.db.base import Base
from realty_api.db.enums import Role
from realty_api.db.models import Appointment, Property, User
from realty_api.db.session import engine, SessionLocal


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Creates a database session on a freshly created schema.

    App code commits freely; the whole schema is dropped after the test.
    """
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


def make_user(db: Session, role: Role, name: str = "Test User", is_active: bool = True) -> User:
    user = User(
        id=uuid.uuid4(),
        name=name,
        email=f"{role.name.lower()}-{uuid.uuid4().hex[:8]}@test.com",
        role=role.value,
        is_active=is_active,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _insert_appointment(
    db: Session,
    property_id,
    client_id,
    start_time: str = "10:00",
    end_time: str = "11:00",
    status: str = "pending",
    appointment_date: date | None = None,
    agent_id=None,
) -> Appointment:
    """Insert an appointment directly, bypassing booking rules."""
    appointment = Appointment(
        id=uuid.uuid4(),
        property_id=property_id,
        client_id=client_id,
        agent_id=agent_id,
        date=appointment_date or date.today() + timedelta(days=30),
        start_time=start_time,
        end_time=end_time,
        status=status,
    )
    db.add(appointment)
    db.commit()
    db.refresh(appointment)
    return appointment


@pytest.fixture(scope="function")
def admin_user(db: Session) -> User:
    return make_user(db, Role.ADMIN, name="Admin")


@pytest.fixture(scope="function")
def agent_user(db: Session) -> User:
    return make_user(db, Role.AGENT, name="Agent")


@pytest.fixture(scope="function")
def client_user(db: Session) -> User:
    return make_user(db, Role.CLIENT, name="Client")


@pytest.fixture(scope="function")
def other_client(db: Session) -> User:
    return make_user(db, Role.CLIENT, name="Other Client")


@pytest.fixture(scope="function")
def test_property(db: Session, agent_user: User) -> Property:
    prop = Property(
        id=uuid.uuid4(),
        title="Two bedroom flat",
        location="Calle 10 #5-20",
        price=Decimal("250000.00"),
        agent_id=agent_user.id,
    )
    db.add(prop)
    db.commit()
    db.refresh(prop)
    return prop


# =============================================================================
# Client Fixtures
# =============================================================================

def auth_headers(user: User) -> dict[str, str]:
    token = create_session_token(user_id=user.id, email=user.email, role=user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[AsyncClient, None, None]:
    """Unauthenticated AsyncClient."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    yield AsyncClient(transport=ASGITransport(app=app), base_url="http://test")

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client_as(db: Session) -> Generator[Callable[[User], AsyncClient], None, None]:
    """
    Factory for AsyncClients authenticated as a given user.

    Usage:
        async with client_as(agent_user) as c:
            await c.get("/api/appointments")
    """
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    def _make(user: User) -> AsyncClient:
        return AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
            headers=auth_headers(user),
        )

    yield _make

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def make_appointment(db: Session, test_property: Property, client_user: User) -> Callable[..., Appointment]:
    """
    Factory inserting appointments directly, bypassing booking rules.

    Defaults to a pending 10:00-11:00 slot on test_property for client_user,
    30 days from today.
    """
    def _make(**overrides) -> Appointment:
        values = {"property_id": test_property.id, "client_id": client_user.id}
        values.update(overrides)
        return _insert_appointment(db, **values)

    return _make
