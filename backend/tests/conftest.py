# backend/tests/conftest.py
"""
Pytest configuration for barberbook.

Every test gets its own file-backed SQLite database. A file (not ``:memory:``)
is used so that concurrency tests can open one connection per thread against
the same data.
"""

import os
import sys

# CRITICAL: configure settings BEFORE any barberbook imports
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["TEST_DATABASE_URL"] = ""
os.environ["ENVIRONMENT"] = "test"
os.environ["IS_TESTING"] = "true"
os.environ["PROFESSIONAL_LOCK_BACKEND"] = "local"
os.environ["BOOKING_RETRY_BASE_DELAY"] = "0"

# Add the backend directory to Python path so imports work
backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, backend_dir)

from types import SimpleNamespace
from typing import Iterator

from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from barberbook.database import Base, get_db
from barberbook.main import app
import barberbook.models  # noqa: F401
from barberbook.models import (
    Barbershop,
    Professional,
    ProfessionalService,
    Service,
    User,
    UserRole,
)


@pytest.fixture
def engine(tmp_path) -> Iterator[Engine]:
    db_path = tmp_path / "barberbook_test.db"
    test_engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )

    @event.listens_for(test_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False, autoflush=False, bind=engine, expire_on_commit=False
    )


@pytest.fixture
def db(session_factory: sessionmaker) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def catalog(db: Session) -> SimpleNamespace:
    """
    One barbershop with two barbers and a client.

    - haircut: 30 min / 5000, barber_a overrides duration to 45 only
    - beard_trim: 20 min / 3000, no overrides
    - retired: inactive catalog entry
    """
    shop = Barbershop(name="Navalha de Ouro", address="Rua Augusta 100")
    client_user = User(
        full_name="Ana Cliente", email="ana@example.com", role=UserRole.CLIENT.value
    )
    barber_a_user = User(
        full_name="Bruno Barbeiro", email="bruno@example.com", role=UserRole.BARBER.value
    )
    barber_b_user = User(
        full_name="Carla Barbeira", email="carla@example.com", role=UserRole.BARBER.value
    )
    db.add_all([shop, client_user, barber_a_user, barber_b_user])
    db.flush()

    barber_a = Professional(user_id=barber_a_user.id, barbershop_id=shop.id, is_master=True)
    barber_b = Professional(user_id=barber_b_user.id, barbershop_id=shop.id)
    haircut = Service(barbershop_id=shop.id, name="Corte", duration_min=30, price_cents=5000)
    beard_trim = Service(barbershop_id=shop.id, name="Barba", duration_min=20, price_cents=3000)
    retired = Service(
        barbershop_id=shop.id, name="Relaxamento", duration_min=60, price_cents=9000, is_active=False
    )
    db.add_all([barber_a, barber_b, haircut, beard_trim, retired])
    db.flush()

    db.add(
        ProfessionalService(
            professional_id=barber_a.id, service_id=haircut.id, custom_duration_min=45
        )
    )
    db.commit()

    return SimpleNamespace(
        shop_id=shop.id,
        client_id=client_user.id,
        barber_a_id=barber_a.id,
        barber_b_id=barber_b.id,
        haircut_id=haircut.id,
        beard_trim_id=beard_trim.id,
        retired_id=retired.id,
    )


@pytest.fixture
def client(session_factory: sessionmaker) -> Iterator[TestClient]:
    def _override_get_db() -> Iterator[Session]:
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
