# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/routes/__init__.py

Ensamblador de las rutas de pagos bajo /api.

Todas las rutas pasan por el rate limiter configurado
(RATE_LIMIT_WINDOW_MS / RATE_LIMIT_MAX_REQUESTS).

Autor: PyLinks
Fecha: 2026-10-07
"""

from fastapi import APIRouter, Depends

from pylinks.modules.payments.middleware import check_rate_limit

from .accounts import affiliates_router, merchants_router, subscriptions_router, webhooks_router
from .error_handlers import register_payment_error_handlers
from .escrow import router as escrow_router
from .payments import router as payments_router

api_router = APIRouter(prefix="/api", dependencies=[Depends(check_rate_limit)])

api_router.include_router(merchants_router)
api_router.include_router(payments_router)
api_router.include_router(escrow_router)
api_router.include_router(subscriptions_router)
api_router.include_router(affiliates_router)
api_router.include_router(webhooks_router)

__all__ = ["api_router", "register_payment_error_handlers"]

# Fin del archivo pylinks/modules/payments/routes/__init__.py
