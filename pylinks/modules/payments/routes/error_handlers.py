# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/routes/error_handlers.py

Traduce PyLinksError a respuestas {"code", "message"} con su HTTP status.

Autor: PyLinks
Fecha: 2026-10-07
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from starlette.requests import Request
from starlette.responses import JSONResponse

from pylinks.shared.middleware import error_response
from pylinks.modules.payments.errors import PyLinksError, RateLimited

logger = logging.getLogger(__name__)


async def pylinks_error_handler(request: Request, exc: PyLinksError) -> JSONResponse:
    headers = None
    if isinstance(exc, RateLimited):
        headers = {"Retry-After": str(exc.retry_after)}
    if exc.http_status >= 500:
        logger.warning(f"[API] {request.method} {request.url.path} → {exc.code}: {exc.message}")
    else:
        logger.debug(f"[API] {request.method} {request.url.path} → {exc.code}")
    return error_response(exc.code, exc.message, exc.http_status, headers)


def register_payment_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PyLinksError, pylinks_error_handler)


__all__ = ["pylinks_error_handler", "register_payment_error_handlers"]
