"""
Shared pytest fixtures for the helpdesk test suite.

Provides:
    - engine: fresh in-memory SQLite database per test
    - session: ORM session bound to that database
    - client: FastAPI test client wired to the same database and a temp media root
    - make_user / make_ticket: factories for seeding the directory and tickets
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PRIMARY_TIMEZONE", "Asia/Karachi")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from helpdesk.core.errors import validate_payload
from helpdesk.main import app
from helpdesk.models import Base
from helpdesk.schemas import TicketCreate, UserCreate
from helpdesk.services.db import enable_sqlite_savepoints, get_db
from helpdesk.services.directory import DirectoryService
from helpdesk.services.media import MediaStore, get_media_store
from helpdesk.services.tickets import TicketService


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def session(session_factory):
    with session_factory() as s:
        yield s
        s.rollback()


@pytest.fixture()
def media_store(tmp_path):
    return MediaStore(root=tmp_path / "media", base_url="http://media.test")


@pytest.fixture()
def client(session_factory, media_store):
    def _get_db():
        s = session_factory()
        try:
            yield s
            s.commit()
        except Exception:
            s.rollback()
            raise
        finally:
            s.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_media_store] = lambda: media_store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(session):
    counter = {"n": 0}

    def _make(role="Incharge", **overrides):
        counter["n"] += 1
        n = counter["n"]
        data = {
            "full_name": f"User {n}",
            "email": f"user{n}@example.com",
            "username": f"user{n}",
            "role": role,
            "department": "IT",
        }
        data.update(overrides)
        return DirectoryService(session).create_user(validate_payload(UserCreate, data))

    return _make


@pytest.fixture()
def make_ticket(session):
    def _make(user_id="creator", recipient_ids=("r1",), **overrides):
        data = {
            "user_id": user_id,
            "recipient_ids": recipient_ids if isinstance(recipient_ids, str) else list(recipient_ids),
            "type": "general",
            "priority": "Normal",
        }
        data.update(overrides)
        return TicketService(session).create_ticket(validate_payload(TicketCreate, data))

    return _make
