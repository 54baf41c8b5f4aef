# -*- coding: utf-8 -*-
"""
pylinks/shared/middleware/exception_handler.py

Respuestas de error JSON uniformes: {"code", "message"}.

- JSONExceptionMiddleware: captura excepciones no manejadas, registra el
  traceback y responde INTERNAL_ERROR sin detalles internos.
- register_exception_handlers(app): errores de validación de request
  (VALIDATION_ERROR) y HTTPException de Starlette con el mismo formato.

Autor: PyLinks
Fecha: 2026-10-07
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable, Mapping, Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = logging.getLogger(__name__)

# Header para request ID (proxy, balanceador, etc.)
REQUEST_ID_HEADERS = ["x-request-id", "x-correlation-id"]

_HTTP_CODES = {
    401: "NOT_AUTHORIZED",
    403: "NOT_AUTHORIZED",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    429: "RATE_LIMITED",
}


def get_request_id(request: Request) -> str:
    """Extrae request_id de headers o genera uno nuevo."""
    for header in REQUEST_ID_HEADERS:
        value = request.headers.get(header)
        if value:
            return value
    return uuid.uuid4().hex[:16]


def error_response(
    code: str,
    message: str,
    status_code: int,
    headers: Optional[Mapping[str, str]] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"code": code, "message": message},
        headers=dict(headers) if headers else None,
    )


class JSONExceptionMiddleware(BaseHTTPMiddleware):
    """Middleware que captura excepciones no manejadas y devuelve JSON."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = get_request_id(request)
        request.state.request_id = request_id

        try:
            return await call_next(request)
        except Exception as e:
            logger.exception(
                f"unhandled_exception request_id={request_id} "
                f"method={request.method} path={request.url.path} error={e!r}"
            )
            response = error_response("INTERNAL_ERROR", "Error interno del servidor", 500)
            response.headers["X-Request-ID"] = request_id
            return response


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Solicitud inválida"
    return error_response("VALIDATION_ERROR", message, 422)


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = _HTTP_CODES.get(exc.status_code, "HTTP_ERROR")
    return error_response(code, str(exc.detail), exc.status_code, getattr(exc, "headers", None))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)


__all__ = [
    "JSONExceptionMiddleware",
    "error_response",
    "get_request_id",
    "register_exception_handlers",
]

# Fin del archivo pylinks/shared/middleware/exception_handler.py
