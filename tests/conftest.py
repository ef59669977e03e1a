"""
Pytest fixtures for the masjid screens API.

Every test gets its own SQLite file, a session bound to it, and a
TestClient whose ``get_db`` dependency points at the same database.
"""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from masjid_screens.db import Base, get_db
from masjid_screens.main import app
from masjid_screens.models import content, content_schedule, prayer_time, user  # noqa: F401
from masjid_screens.models.masjid import Masjid
from masjid_screens.models.screen import Screen
from masjid_screens.models.user import ROLE_ADMIN, ROLE_USER, User
from masjid_screens.services import screen_registry
from masjid_screens.services.auth import issue_session
from masjid_screens.services.clock import utcnow


@pytest.fixture(scope='function')
def engine(tmp_path):
    test_engine = create_engine(
        f"sqlite:///{tmp_path / 'screens.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture(scope='function')
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture(scope='function')
def db_session(session_factory):
    """Session used by tests to arrange data and inspect results."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(scope='function')
def client(session_factory):
    """TestClient wired to the per-test database.

    Not entered as a context manager so the startup hook never touches
    the configured production database.
    """

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def now():
    return utcnow().replace(microsecond=0)


@pytest.fixture
def masjid(db_session):
    record = Masjid(name="Central Mosque", timezone="UTC")
    db_session.add(record)
    db_session.commit()
    db_session.refresh(record)
    return record


@pytest.fixture
def other_masjid(db_session):
    record = Masjid(name="Eastside Masjid", timezone="Asia/Karachi")
    db_session.add(record)
    db_session.commit()
    db_session.refresh(record)
    return record


def _make_user(db_session, email, role, masjid_id):
    record = User(email=email, name=email.split("@")[0], role=role, masjid_id=masjid_id)
    db_session.add(record)
    db_session.commit()
    db_session.refresh(record)
    return record


@pytest.fixture
def admin_user(db_session, masjid):
    return _make_user(db_session, "admin@example.com", ROLE_ADMIN, masjid.id)


@pytest.fixture
def staff_user(db_session, masjid):
    return _make_user(db_session, "staff@example.com", ROLE_USER, masjid.id)


@pytest.fixture
def other_admin(db_session, other_masjid):
    return _make_user(db_session, "admin@eastside.example", ROLE_ADMIN, other_masjid.id)


@pytest.fixture
def admin_headers(db_session, admin_user):
    token = issue_session(db_session, admin_user).token
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def staff_headers(db_session, staff_user):
    token = issue_session(db_session, staff_user).token
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_admin_headers(db_session, other_admin):
    token = issue_session(db_session, other_admin).token
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def pair_screen(db_session):
    """Factory that runs the full pairing flow and returns the paired screen."""

    def _pair(masjid_id, name="Main Hall", at=None):
        current_time = at or utcnow()
        code = screen_registry.request_pairing(db_session, now=current_time)["pairing_code"]
        paired = screen_registry.claim_screen(db_session, code, name, masjid_id, now=current_time + timedelta(seconds=1))
        screen_registry.check_pairing_status(db_session, code, now=current_time + timedelta(seconds=2))
        db_session.refresh(paired)
        return paired

    return _pair


@pytest.fixture
def device_headers():
    def _headers(paired: Screen) -> dict:
        return {"X-Screen-ID": str(paired.id), "Authorization": f"Bearer {paired.api_key}"}

    return _headers
