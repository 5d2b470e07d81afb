from datetime import timedelta

from fastapi.testclient import TestClient

from app.core.security import create_access_token
from app.main import app
from conftest import FakeResult, make_user

client = TestClient(app)


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def test_missing_token(db_only):
    response = client.get("/api/v1/users/profile")
    assert response.status_code == 401
    assert response.json()["code"] == "unauthorized"


def test_invalid_token(db_only):
    response = client.get("/api/v1/users/profile", headers=_auth("not-a-jwt"))
    assert response.status_code == 401


def test_expired_token(db_only):
    user = make_user()
    db_only.on_execute_return(FakeResult(scalar=user))
    token = create_access_token(str(user.id), role="user", expires_delta=timedelta(seconds=-1))

    response = client.get("/api/v1/users/profile", headers=_auth(token))

    assert response.status_code == 401


def test_unknown_user(db_only):
    token = create_access_token("0b5c8e7a-3a9e-4c59-9a52-3f5f1f6f4d1e", role="user")
    response = client.get("/api/v1/users/profile", headers=_auth(token))
    assert response.status_code == 401


def test_blocked_user(db_only):
    user = make_user(status="blocked")
    db_only.on_execute_return(FakeResult(scalar=user))
    token = create_access_token(str(user.id), role="user")

    response = client.get("/api/v1/users/profile", headers=_auth(token))

    assert response.status_code == 403


def test_valid_token_reaches_route(db_only):
    user = make_user()
    db_only.on_execute_return(FakeResult(scalar=user))
    token = create_access_token(str(user.id), role="user")

    response = client.get("/api/v1/users/profile", headers=_auth(token))

    assert response.status_code == 200
    assert response.json()["data"]["email"] == user.email


def test_borrower_cannot_reach_admin_routes(db_only):
    user = make_user()
    db_only.on_execute_return(FakeResult(scalar=user))
    token = create_access_token(str(user.id), role="user")

    response = client.get("/api/v1/admin/stats", headers=_auth(token))

    assert response.status_code == 403
    assert response.json()["message"] == "Access denied. Not an admin."
