from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from app.core.errors import register_exception_handlers
from app.core.field_cipher import MalformedCiphertextError
from app.core.response_envelope import register_response_envelope


def _build_app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)
    register_response_envelope(app)

    @app.get("/items")
    async def items():
        return [1, 2]

    @app.post("/items", status_code=201)
    async def create_item():
        return {"id": 3}

    @app.delete("/items/1", status_code=204)
    async def delete_item():
        return None

    @app.get("/missing")
    async def missing():
        raise HTTPException(status_code=404, detail="Item not found")

    @app.get("/unreadable")
    async def unreadable():
        raise MalformedCiphertextError("bad segments")

    @app.get("/boom")
    async def boom():
        raise RuntimeError("unexpected")

    return app


def test_success_is_wrapped():
    client = TestClient(_build_app())

    listing = client.get("/items").json()
    created = client.post("/items")

    assert listing == {"code": "ok", "message": "OK", "data": [1, 2], "details": {}}
    assert created.status_code == 201
    assert created.json()["code"] == "created"
    assert created.json()["data"] == {"id": 3}


def test_no_content_becomes_empty_envelope():
    response = TestClient(_build_app()).delete("/items/1")
    assert response.status_code == 200
    assert response.json()["data"] is None


def test_http_errors_use_envelope():
    body = TestClient(_build_app()).get("/missing").json()
    assert body == {
        "code": "not_found",
        "message": "Item not found",
        "data": None,
        "details": {"detail": "Item not found"},
    }


def test_decryption_failure_hides_reason():
    response = TestClient(_build_app()).get("/unreadable")
    assert response.status_code == 500
    assert response.json()["code"] == "data_unavailable"
    assert "bad segments" not in response.text


def test_unhandled_errors_become_500():
    client = TestClient(_build_app(), raise_server_exceptions=False)
    response = client.get("/boom")
    assert response.status_code == 500
    assert response.json()["code"] == "internal_server_error"


def test_openapi_is_not_wrapped():
    schema = TestClient(_build_app()).get("/openapi.json").json()
    assert "openapi" in schema
