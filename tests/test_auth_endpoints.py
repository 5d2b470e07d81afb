from fastapi.testclient import TestClient

from app.core.field_cipher import get_field_cipher
from app.core.security import decode_token, verify_password
from app.main import app
from app.models import User
from conftest import DEFAULT_PASSWORD, FakeResult, make_admin, make_user

client = TestClient(app)

REGISTER_PAYLOAD = {
    "name": "Jane Borrower",
    "phone": "5550111",
    "email": "jane@example.com",
    "national_id": "NID-987654",
    "tax_id": "TAX-123456",
    "occupation": "Engineer",
    "organization": "City School",
    "password": "CorrectHorse9!",
}


def test_register_creates_user_with_encrypted_pii(db_only):
    response = client.post("/api/v1/auth/register", json=REGISTER_PAYLOAD)

    assert response.status_code == 201
    body = response.json()
    assert body["code"] == "created"
    assert body["data"]["message"] == "User registered successfully!"

    (user,) = [obj for obj in db_only.added if isinstance(obj, User)]
    assert user.role == "user"
    assert user.national_id_encrypted != "NID-987654"
    assert get_field_cipher().decrypt(user.national_id_encrypted).plaintext == "NID-987654"
    assert get_field_cipher().decrypt(user.tax_id_encrypted).plaintext == "TAX-123456"
    assert verify_password("CorrectHorse9!", user.hashed_password)
    assert db_only.commits == 1


def test_register_conflict(db_only):
    db_only.on_execute_return(FakeResult(items=[make_user(email="jane@example.com")]))

    response = client.post("/api/v1/auth/register", json=REGISTER_PAYLOAD)

    assert response.status_code == 409
    body = response.json()
    assert body["code"] == "conflict"
    assert body["data"] is None
    assert not db_only.added


def test_register_short_password(db_only):
    response = client.post("/api/v1/auth/register", json={**REGISTER_PAYLOAD, "password": "short"})
    assert response.status_code == 400
    assert not db_only.added


def test_register_validation_error_hides_submitted_values(db_only):
    response = client.post(
        "/api/v1/auth/register",
        json={**REGISTER_PAYLOAD, "email": "not-an-email"},
    )

    assert response.status_code == 422
    body = response.json()
    assert body["code"] == "validation_error"
    assert body["message"].startswith("email")
    assert "NID-987654" not in response.text
    assert all("input" not in error for error in body["details"]["errors"])


def test_login_returns_token(db_only):
    user = make_user()
    db_only.on_execute_return(FakeResult(scalar=user))

    response = client.post(
        "/api/v1/auth/login",
        json={"email_or_phone": user.email, "password": DEFAULT_PASSWORD},
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["token_type"] == "bearer"
    assert data["user"]["id"] == str(user.id)
    assert data["user"]["role"] == "user"
    claims = decode_token(data["access_token"], expected_type="access")
    assert claims["sub"] == str(user.id)
    assert claims["role"] == "user"


def test_login_wrong_password(db_only):
    db_only.on_execute_return(FakeResult(scalar=make_user()))

    response = client.post(
        "/api/v1/auth/login",
        json={"email_or_phone": "user@example.com", "password": "WrongPassword1!"},
    )

    assert response.status_code == 401
    assert response.json()["code"] == "unauthorized"


def test_login_unknown_account(db_only):
    response = client.post(
        "/api/v1/auth/login",
        json={"email_or_phone": "ghost@example.com", "password": DEFAULT_PASSWORD},
    )
    assert response.status_code == 401


def test_login_blocked_account(db_only):
    db_only.on_execute_return(FakeResult(scalar=make_user(status="blocked")))

    response = client.post(
        "/api/v1/auth/login",
        json={"email_or_phone": "user@example.com", "password": DEFAULT_PASSWORD},
    )

    assert response.status_code == 403


def test_admin_login(db_only):
    admin = make_admin()
    db_only.on_execute_return(FakeResult(scalar=admin))

    response = client.post(
        "/api/v1/auth/admin/login",
        json={"email_or_phone": admin.email, "password": DEFAULT_PASSWORD},
    )

    assert response.status_code == 200
    claims = decode_token(response.json()["data"]["access_token"])
    assert claims["role"] == "admin"


def test_admin_login_rejects_borrower_accounts(db_only):
    # The role filter lives in the query, so a borrower simply is not found.
    response = client.post(
        "/api/v1/auth/admin/login",
        json={"email_or_phone": "user@example.com", "password": DEFAULT_PASSWORD},
    )
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials or not an admin."


def test_login_is_rate_limited(db_only):
    payload = {"email_or_phone": "ghost@example.com", "password": "WrongPassword1!"}
    statuses = [client.post("/api/v1/auth/login", json=payload).status_code for _ in range(11)]

    assert statuses[:10] == [401] * 10
    assert statuses[10] == 429
