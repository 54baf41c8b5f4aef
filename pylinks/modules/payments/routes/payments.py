# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/routes/payments.py

Rutas de pagos regulares.

Endpoints:
- POST /payments                 createPayment (X-API-Key)
- GET  /payments                 pagos del comercio (X-API-Key)
- GET  /payments/{id}            getPayment (público, para el checkout)
- GET  /payments/{id}/webhooks   eventos del pago (X-API-Key)
- POST /payments/{id}/cancel     created → cancelled (X-API-Key)
- POST /payments/{id}/refund     paid → refunded (X-API-Key)

Autor: PyLinks
Fecha: 2026-10-07
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from pylinks.modules.payments.container import PaymentsContainer
from pylinks.modules.payments.enums import PaymentStatus, PaymentType
from pylinks.modules.payments.models import Merchant
from pylinks.modules.payments.routes.deps import get_container, payment_out, require_merchant
from pylinks.modules.payments.schemas import (
    PaymentCreateRequest,
    PaymentListResponse,
    PaymentResponse,
    WebhookEventResponse,
)

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def create_payment_route(
    body: PaymentCreateRequest,
    merchant: Merchant = Depends(require_merchant),
    container: PaymentsContainer = Depends(get_container),
) -> PaymentResponse:
    """
    Crea un pago regular en estado created.

    Re-enviar el mismo sessionId con parámetros idénticos devuelve el pago
    existente; con parámetros distintos responde DUPLICATE_SESSION.
    """
    payment = await container.ledger.create_payment(
        merchant.wallet_address,
        body.amount,
        body.session_id,
        body.description,
        [s.to_spec() for s in body.splits],
        customer=body.customer,
        referral_code=body.referral_code,
    )
    return payment_out(payment, container)


@router.get("", response_model=PaymentListResponse)
async def list_payments_route(
    status_filter: Optional[PaymentStatus] = Query(default=None, alias="status"),
    payment_type: Optional[PaymentType] = Query(default=None),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    merchant: Merchant = Depends(require_merchant),
    container: PaymentsContainer = Depends(get_container),
) -> PaymentListResponse:
    payments = await container.ledger.list_payments(
        merchant.wallet_address,
        status=status_filter,
        payment_type=payment_type,
        limit=limit,
        offset=offset,
    )
    return PaymentListResponse(
        items=[payment_out(p, container) for p in payments],
        limit=limit,
        offset=offset,
    )


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment_route(
    payment_id: int,
    container: PaymentsContainer = Depends(get_container),
) -> PaymentResponse:
    """Estado actual del pago; un pago vencido se devuelve ya expirado."""
    payment = await container.ledger.get_payment(payment_id)
    return payment_out(payment, container)


@router.get("/{payment_id}/webhooks", response_model=List[WebhookEventResponse])
async def list_payment_webhooks_route(
    payment_id: int,
    merchant: Merchant = Depends(require_merchant),
    container: PaymentsContainer = Depends(get_container),
) -> List[WebhookEventResponse]:
    payment = await container.ledger.get_payment(payment_id)
    container.ledger.require_owner(payment, merchant.wallet_address)
    events = await container.dispatcher.list_for_payment(payment_id)
    return [WebhookEventResponse.model_validate(e) for e in events]


@router.post("/{payment_id}/cancel", response_model=PaymentResponse)
async def cancel_payment_route(
    payment_id: int,
    merchant: Merchant = Depends(require_merchant),
    container: PaymentsContainer = Depends(get_container),
) -> PaymentResponse:
    payment = await container.ledger.cancel_payment(payment_id, merchant.wallet_address)
    return payment_out(payment, container)


@router.post("/{payment_id}/refund", response_model=PaymentResponse)
async def refund_payment_route(
    payment_id: int,
    merchant: Merchant = Depends(require_merchant),
    container: PaymentsContainer = Depends(get_container),
) -> PaymentResponse:
    payment = await container.ledger.refund_payment(payment_id, merchant.wallet_address)
    return payment_out(payment, container)


# Fin del archivo pylinks/modules/payments/routes/payments.py
