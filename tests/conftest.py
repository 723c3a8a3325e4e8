import os
import tempfile
from datetime import datetime

os.environ.setdefault("ECOVOICE_DATA_DIR", tempfile.mkdtemp(prefix="ecovoice-test-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ecovoice import crud
from ecovoice.activity_log import ActivityLog
from ecovoice.database import Base, make_engine
from ecovoice.main import LocalState, app, get_db, get_local_state
from ecovoice.schemas import ActivityRecord, Category
from ecovoice.storage import MemoryStore

LOCAL_TZ = datetime.now().astimezone().tzinfo


def local_dt(year, month, day, hour=12, minute=0):
    return datetime(year, month, day, hour, minute, tzinfo=LOCAL_TZ)


def make_record(category=Category.transport, subtype="car", quantity=10.0, co2_kg=2.3, when=None, **kwargs):
    return ActivityRecord(
        category=category, subtype=subtype, quantity=quantity, co2_kg=co2_kg,
        timestamp=when or datetime.now().astimezone(), **kwargs,
    )


class FailingStore(MemoryStore):
    """Reads work, writes fail like a full disk."""

    def set(self, key, value):
        raise OSError("No space left on device")


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def activity_log(store):
    return ActivityLog(store)


@pytest.fixture
def local_state(store):
    return LocalState(store).load()


@pytest.fixture
def session_factory():
    engine = make_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield TestingSession
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory, local_state):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    with session_factory() as session:
        crud.seed_challenges(session)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_local_state] = lambda: local_state
    yield TestClient(app)
    app.dependency_overrides.clear()
