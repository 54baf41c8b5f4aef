# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/routes/escrow.py

Rutas de escrow.

Endpoints:
- POST /escrow                    createEscrowPayment (X-API-Key)
- GET  /escrow/{id}               estado del escrow
- GET  /escrow/{id}/settlement    liquidación final (409 si hay disputa)
- POST /escrow/{id}/release       releaseEscrowPayment (cliente)
- POST /escrow/{id}/dispute       disputeEscrowPayment (comercio o cliente)
- POST /escrow/{id}/resolve       resolución manual (X-Arbiter-Key)
- POST /escrow/{id}/refund        reembolso del comercio (X-API-Key)

La identidad del cliente (`caller`) la provee la capa de autenticación de
wallets que está delante de esta API.

Autor: PyLinks
Fecha: 2026-10-07
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from pylinks.modules.payments.container import PaymentsContainer
from pylinks.modules.payments.models import Merchant
from pylinks.modules.payments.routes.deps import (
    get_container,
    payment_out,
    require_arbiter,
    require_merchant,
)
from pylinks.modules.payments.schemas import (
    CallerRequest,
    DisputeResolveRequest,
    EscrowCreateRequest,
    PaymentResponse,
    SettlementResponse,
)
from pylinks.modules.payments.utils.amounts import from_fixed_point

router = APIRouter(prefix="/escrow", tags=["escrow"])


@router.post("", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def create_escrow_route(
    body: EscrowCreateRequest,
    merchant: Merchant = Depends(require_merchant),
    container: PaymentsContainer = Depends(get_container),
) -> PaymentResponse:
    payment = await container.escrow.create_escrow_payment(
        merchant.wallet_address,
        body.customer,
        body.usd_amount,
        body.session_id,
        body.description,
        body.auto_release,
    )
    return payment_out(payment, container)


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_escrow_route(
    payment_id: int,
    container: PaymentsContainer = Depends(get_container),
) -> PaymentResponse:
    payment = await container.escrow.get_escrow_payment(payment_id)
    return payment_out(payment, container)


@router.get("/{payment_id}/settlement", response_model=SettlementResponse)
async def get_settlement_route(
    payment_id: int,
    container: PaymentsContainer = Depends(get_container),
) -> SettlementResponse:
    settlement = await container.escrow.get_settlement(payment_id)
    settings = container.settings
    return SettlementResponse(
        payment_id=settlement.payment_id,
        status=settlement.status,
        recipient=settlement.recipient,
        amount=from_fixed_point(settlement.amount, settings.token_decimals),
        usd_amount=from_fixed_point(settlement.usd_amount, settings.usd_decimals),
        oracle_price=from_fixed_point(settlement.oracle_price, settings.usd_decimals),
        resolution=settlement.resolution,
        settled_at=settlement.settled_at,
    )


@router.post("/{payment_id}/release", response_model=PaymentResponse)
async def release_escrow_route(
    payment_id: int,
    body: CallerRequest,
    container: PaymentsContainer = Depends(get_container),
) -> PaymentResponse:
    payment = await container.escrow.release_escrow_payment(payment_id, body.caller)
    return payment_out(payment, container)


@router.post("/{payment_id}/dispute", response_model=PaymentResponse)
async def dispute_escrow_route(
    payment_id: int,
    body: CallerRequest,
    container: PaymentsContainer = Depends(get_container),
) -> PaymentResponse:
    payment = await container.escrow.dispute_escrow_payment(payment_id, body.caller)
    return payment_out(payment, container)


@router.post(
    "/{payment_id}/resolve",
    response_model=PaymentResponse,
    dependencies=[Depends(require_arbiter)],
)
async def resolve_dispute_route(
    payment_id: int,
    body: DisputeResolveRequest,
    container: PaymentsContainer = Depends(get_container),
) -> PaymentResponse:
    payment = await container.escrow.resolve_dispute(payment_id, body.outcome, body.arbiter)
    return payment_out(payment, container)


@router.post("/{payment_id}/refund", response_model=PaymentResponse)
async def refund_escrow_route(
    payment_id: int,
    merchant: Merchant = Depends(require_merchant),
    container: PaymentsContainer = Depends(get_container),
) -> PaymentResponse:
    payment = await container.escrow.refund_escrow_payment(payment_id, merchant.wallet_address)
    return payment_out(payment, container)


# Fin del archivo pylinks/modules/payments/routes/escrow.py
