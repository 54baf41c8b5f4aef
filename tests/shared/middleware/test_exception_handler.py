# -*- coding: utf-8 -*-
"""
tests/shared/middleware/test_exception_handler.py

Errores como JSON {code, message}: excepciones no manejadas, validación
de FastAPI y HTTPException.
"""

import pytest
from fastapi import FastAPI, HTTPException
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel

from pylinks.shared.middleware import JSONExceptionMiddleware, get_request_id, register_exception_handlers


class _Body(BaseModel):
    amount: int


def _build_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(JSONExceptionMiddleware)
    register_exception_handlers(app)

    @app.get("/boom")
    async def boom():
        raise RuntimeError("fallo inesperado")

    @app.get("/gone")
    async def gone():
        raise HTTPException(status_code=404, detail="No existe")

    @app.post("/items")
    async def items(body: _Body):
        return {"amount": body.amount}

    return app


@pytest.fixture
async def client():
    transport = ASGITransport(app=_build_app(), raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


class TestJSONExceptionMiddleware:
    @pytest.mark.asyncio
    async def test_unhandled_exception_is_json_500(self, client, caplog):
        response = await client.get("/boom", headers={"X-Request-ID": "req-123"})

        assert response.status_code == 500
        assert response.json() == {"code": "INTERNAL_ERROR", "message": "Error interno del servidor"}
        assert response.headers["X-Request-ID"] == "req-123"
        assert "unhandled_exception request_id=req-123" in caplog.text

    @pytest.mark.asyncio
    async def test_validation_error_is_422(self, client):
        response = await client.post("/items", json={"amount": "muchos"})
        assert response.status_code == 422
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["message"].startswith("amount:")

    @pytest.mark.asyncio
    async def test_http_exception_keeps_status(self, client):
        response = await client.get("/gone")
        assert response.status_code == 404
        assert response.json() == {"code": "NOT_FOUND", "message": "No existe"}

    @pytest.mark.asyncio
    async def test_unknown_route(self, client):
        response = await client.get("/no-such-route")
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"


class TestRequestId:
    def test_generated_when_missing(self):
        class _Req:
            headers = {}

        assert len(get_request_id(_Req())) == 16
