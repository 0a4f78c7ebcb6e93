"""Shared fixtures: an in-memory SQLite database behind the FastAPI app"""
import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_PROVIDER"] = "local"
os.environ["DATA_BACKEND"] = "database"
os.environ["IMAGE_PROVIDER"] = "none"
os.environ["JWT_SECRET"] = "test-secret"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, StaticPool
from sqlalchemy.orm import sessionmaker

from upcycle_hub.auth import dependencies
from upcycle_hub.db.database import Base, get_db
from upcycle_hub.main import app
import upcycle_hub.models  # noqa: F401
from upcycle_hub.services import mock_product_service

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def fresh_state():
    """Empty tables and fresh singletons for every test"""
    Base.metadata.create_all(bind=engine)
    dependencies._auth_provider = None
    dependencies._register_limiter = None
    mock_product_service._store = None
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register_user(client):
    """Register an account through the API and return the auth response body"""
    def _register(email: str, password: str = "secret123", **fields) -> dict:
        response = client.post("/api/auth/register", json={"email": email, "password": password, **fields})
        assert response.status_code == 201, response.text
        return response.json()
    return _register


@pytest.fixture
def seller(register_user) -> dict:
    data = register_user("seller@example.com", username="seller")
    return {**data["user"], "headers": auth_headers(data["access_token"])}


@pytest.fixture
def buyer(register_user) -> dict:
    data = register_user("buyer@example.com", username="buyer", is_seller=False, is_collector=True)
    return {**data["user"], "headers": auth_headers(data["access_token"])}


@pytest.fixture
def product_payload() -> dict:
    return {
        "title": "Upcycled Wooden Chair",
        "description": "Handcrafted chair made from reclaimed wood",
        "price_cents": 8900,
        "category": "Furniture",
        "condition": "Like New",
        "location": "Seattle, WA",
    }


@pytest.fixture
def product(client, seller, product_payload) -> dict:
    response = client.post("/api/products", json=product_payload, headers=seller["headers"])
    assert response.status_code == 201, response.text
    return response.json()["product"]
