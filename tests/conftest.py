import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from booking_api import models  # noqa: F401
from booking_api.db import get_session
from booking_api.deps import get_now
from booking_api.main import app

from tests.sample_data import NOW, WEEK_HOURS


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def client(engine):
    def override_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_now] = lambda: NOW
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def business(client):
    response = client.post(
        "/businesses",
        json={"slug": "berber-ali", "name": "Berber Ali", "business_hours": WEEK_HOURS},
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def haircut(client, business):
    response = client.post(
        f"/businesses/{business['id']}/services",
        json={"name": "Haircut", "duration": 30},
    )
    assert response.status_code == 201
    return response.json()
