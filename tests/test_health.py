import pytest
from fastapi.testclient import TestClient

from app.core import health as health_module
from app.core.field_cipher import KeyConfigurationError
from app.main import app

client = TestClient(app)


@pytest.fixture(autouse=True)
def _mock_dependencies(monkeypatch):
    async def ok_db():
        return {"status": "ok"}

    async def ok_redis():
        return {"status": "ok"}

    monkeypatch.setattr(health_module.settings, "environment", "test")
    monkeypatch.setattr(health_module, "_check_db", ok_db)
    monkeypatch.setattr(health_module, "_check_redis", ok_redis)
    yield


def test_health_live_returns_ok() -> None:
    response = client.get("/api/v1/health/live")
    assert response.status_code == 200
    body = response.json()
    assert body["code"] == "ok"
    assert body["data"]["status"] == "ok"
    assert "timestamp" in body["data"]


def test_health_ready_ok() -> None:
    response = client.get("/api/v1/health/ready")
    assert response.status_code == 200
    payload = response.json()["data"]
    assert payload["status"] == "ok"
    assert payload["ready"] is True
    assert payload["environment"] == "test"
    assert payload["checks"]["database"]["status"] == "ok"
    assert payload["checks"]["redis"]["status"] == "ok"
    assert payload["checks"]["field_cipher"]["status"] == "ok"


def test_health_alias_matches_ready() -> None:
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json()["data"]["ready"] is True


def test_health_ready_degraded(monkeypatch) -> None:
    async def bad_db():
        return {"status": "error", "error": "unreachable"}

    monkeypatch.setattr(health_module, "_check_db", bad_db)

    response = client.get("/api/v1/health/ready")
    assert response.status_code == 200
    payload = response.json()["data"]
    assert payload["status"] == "degraded"
    assert payload["ready"] is False
    assert payload["checks"]["database"]["status"] == "error"


def test_health_reports_missing_key(monkeypatch) -> None:
    def broken_cipher():
        raise KeyConfigurationError("ENCRYPTION_KEY is not configured")

    monkeypatch.setattr(health_module, "get_field_cipher", broken_cipher)

    payload = client.get("/api/v1/health/ready").json()["data"]
    assert payload["ready"] is False
    assert payload["checks"]["field_cipher"]["status"] == "error"


def test_status_summary() -> None:
    response = client.get("/api/v1/status/summary")
    assert response.status_code == 200
    payload = response.json()["data"]
    assert payload["status"] == "ok"
    assert payload["version"] == health_module.APP_VERSION


def test_security_and_request_id_headers() -> None:
    response = client.get("/api/v1/health/live", headers={"x-request-id": "req-123"})
    assert response.headers["x-request-id"] == "req-123"
    assert response.headers["x-content-type-options"] == "nosniff"
    assert response.headers["x-frame-options"] == "DENY"


def test_unsafe_request_id_is_replaced() -> None:
    response = client.get("/api/v1/health/live", headers={"x-request-id": "bad id\twith spaces"})
    request_id = response.headers["x-request-id"]
    assert request_id != "bad id\twith spaces"
    assert len(request_id) == 32
