import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from cafe_pos.db import Base, get_db
from cafe_pos.main import create_app


def _make_app():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    Base.metadata.create_all(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app = create_app()
    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture
def app():
    return _make_app()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def signup(client: TestClient, email: str = "owner@cafe.test", password: str = "password123") -> dict:
    resp = client.post("/api/auth/signup", json={"name": "Owner", "email": email, "password": password})
    assert resp.status_code == 201
    return resp.json()["data"]


@pytest.fixture
def auth_headers(client) -> dict:
    token = signup(client)["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def pos(client, auth_headers) -> dict:
    """A branch with one open terminal session, one floor of two tables and a small menu."""
    branch_id = client.post("/api/branches", json={"name": "Main Street"}, headers=auth_headers).json()["data"]["id"]
    terminal_id = client.post(
        "/api/terminals", json={"terminal_name": "Counter 1", "branch_id": branch_id}, headers=auth_headers
    ).json()["data"]["id"]
    session_id = client.post(
        "/api/sessions/open", json={"terminal_id": terminal_id}, headers=auth_headers
    ).json()["data"]["id"]
    floor_id = client.post(
        "/api/floors", json={"branch_id": branch_id, "name": "Ground Floor"}, headers=auth_headers
    ).json()["data"]["id"]
    table_ids = [
        client.post(
            "/api/tables", json={"floor_id": floor_id, "table_number": number, "seats": 4}, headers=auth_headers
        ).json()["data"]["id"]
        for number in (1, 2)
    ]
    category_id = client.post(
        "/api/categories", json={"branch_id": branch_id, "name": "Coffee"}, headers=auth_headers
    ).json()["data"]["id"]
    cappuccino_id = client.post(
        "/api/products", json={"category_id": category_id, "name": "Cappuccino", "price": "3.50"}, headers=auth_headers
    ).json()["data"]["id"]
    croissant_id = client.post(
        "/api/products", json={"category_id": category_id, "name": "Croissant", "price": "2.20"}, headers=auth_headers
    ).json()["data"]["id"]
    return {
        "branch_id": branch_id,
        "terminal_id": terminal_id,
        "session_id": session_id,
        "floor_id": floor_id,
        "table_ids": table_ids,
        "category_id": category_id,
        "cappuccino_id": cappuccino_id,
        "croissant_id": croissant_id,
    }
