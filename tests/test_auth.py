from datetime import timedelta

import pytest
from jose import jwt

from cafe_pos.auth import create_access_token

from .conftest import signup

AUTH_REQUIRED = "Authentication required"


def test_signup_login_and_me(client) -> None:
    created = signup(client, email="Barista@Cafe.test")
    assert created["user"]["email"] == "barista@cafe.test"
    assert "password" not in created["user"]

    login = client.post("/api/auth/login", json={"email": "barista@cafe.test", "password": "password123"})
    assert login.status_code == 200
    token = login.json()["data"]["token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["data"]["user"]["id"] == created["user"]["id"]


def test_duplicate_signup_conflicts(client) -> None:
    signup(client)
    resp = client.post("/api/auth/signup", json={"name": "Again", "email": "owner@cafe.test", "password": "secret1"})
    assert resp.status_code == 409


def test_login_with_wrong_password(client) -> None:
    signup(client)
    resp = client.post("/api/auth/login", json={"email": "owner@cafe.test", "password": "wrong-password"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid email or password"


def test_missing_credential_is_rejected(client) -> None:
    resp = client.get("/api/tables")
    assert resp.status_code == 401
    assert resp.json()["message"] == AUTH_REQUIRED
    assert resp.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.parametrize(
    "header",
    [
        "Basic b3duZXI6cGFzc3dvcmQ=",
        "Bearer ",
        "Bearer not-a-jwt",
        "Bearer " + jwt.encode({"sub": "someone"}, "some-other-secret", algorithm="HS256"),
    ],
)
def test_bad_credentials_all_look_the_same(client, header) -> None:
    resp = client.get("/api/tables", headers={"Authorization": header})
    assert resp.status_code == 401
    assert resp.json()["message"] == AUTH_REQUIRED


def test_expired_token_is_rejected(client) -> None:
    user_id = signup(client)["user"]["id"]
    token = create_access_token(user_id, expires_delta=timedelta(minutes=-1))
    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["message"] == AUTH_REQUIRED


def test_token_for_unknown_user_is_rejected(client) -> None:
    token = create_access_token("ghost-user")
    resp = client.get("/api/orders", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["message"] == AUTH_REQUIRED
