import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import slotbook.models  # noqa: F401
from slotbook.core.limiter import limiter
from slotbook.core.security import create_access_token
from slotbook.db import get_session
from slotbook.main import create_application
from slotbook.services.slot_store import SqlSlotStore


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def store(session):
    return SqlSlotStore(session)


@pytest.fixture
def client(engine):
    app = create_application()

    def _get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    limiter.reset()
    return TestClient(app)


@pytest.fixture
def auth_headers():
    def _headers(uid: str, **claims) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(uid, claims)}"}

    return _headers
