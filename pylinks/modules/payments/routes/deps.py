# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/routes/deps.py

Dependencias FastAPI compartidas por las rutas de pagos.

- get_container: servicios de la app (app.state.container)
- require_merchant: autentica X-API-Key
- require_arbiter: autentica X-Arbiter-Key (ARBITER_API_KEY)
"""

from __future__ import annotations

import hmac
from typing import Optional

from fastapi import Depends, Header, Request

from pylinks.modules.payments.container import PaymentsContainer
from pylinks.modules.payments.errors import NotAuthorized
from pylinks.modules.payments.models import Merchant, PaymentRecord
from pylinks.modules.payments.schemas import PaymentResponse


def get_container(request: Request) -> PaymentsContainer:
    return request.app.state.container


async def require_merchant(
    x_api_key: Optional[str] = Header(default=None, alias="X-API-Key"),
    container: PaymentsContainer = Depends(get_container),
) -> Merchant:
    return await container.merchants.authenticate(x_api_key)


async def require_arbiter(
    x_arbiter_key: Optional[str] = Header(default=None, alias="X-Arbiter-Key"),
    container: PaymentsContainer = Depends(get_container),
) -> None:
    expected = container.settings.arbiter_api_key
    if not expected:
        raise NotAuthorized("La resolución de disputas no está habilitada")
    if not x_arbiter_key or not hmac.compare_digest(x_arbiter_key, expected):
        raise NotAuthorized("Clave de árbitro inválida", http_status=401)


def payment_out(payment: PaymentRecord, container: PaymentsContainer) -> PaymentResponse:
    return PaymentResponse.from_record(
        payment,
        token_decimals=container.settings.token_decimals,
        usd_decimals=container.settings.usd_decimals,
    )


__all__ = ["get_container", "require_merchant", "require_arbiter", "payment_out"]
