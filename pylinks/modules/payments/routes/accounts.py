# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/routes/accounts.py

Rutas de comercios, suscripciones, afiliados y webhooks fallidos.

Endpoints:
- POST  /merchants                    registro (devuelve la API key una vez)
- GET   /merchants/me                 comercio autenticado
- POST  /merchants/me/api-key         rota la API key
- PATCH /merchants/me/webhook         cambia el endpoint y rota el secreto
- POST  /subscriptions                crea suscripción (X-API-Key)
- GET   /subscriptions/{id}           getSubscription
- POST  /subscriptions/{id}/cancel    comercio o cliente
- POST  /affiliates                   registro de afiliado
- GET   /affiliates/{wallet}          getAffiliate
- GET   /affiliates/code/{code}       búsqueda por código de referido
- GET   /webhooks/failed              eventos permanently_failed (X-API-Key)
- POST  /webhooks/{id}/redeliver      re-encola un evento fallido (X-API-Key)

Autor: PyLinks
Fecha: 2026-10-07
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query, status

from pylinks.modules.payments.container import PaymentsContainer
from pylinks.modules.payments.models import Affiliate, Merchant, Subscription
from pylinks.modules.payments.routes.deps import get_container, require_merchant
from pylinks.modules.payments.schemas import (
    AffiliateCreateRequest,
    AffiliateResponse,
    CallerRequest,
    MerchantCreateRequest,
    MerchantCredentialsResponse,
    MerchantResponse,
    SubscriptionCreateRequest,
    SubscriptionResponse,
    WebhookEventResponse,
    WebhookUpdateRequest,
)
from pylinks.modules.payments.utils.amounts import from_fixed_point

merchants_router = APIRouter(prefix="/merchants", tags=["merchants"])
subscriptions_router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])
affiliates_router = APIRouter(prefix="/affiliates", tags=["affiliates"])
webhooks_router = APIRouter(prefix="/webhooks", tags=["webhooks"])


def _subscription_out(subscription: Subscription, container: PaymentsContainer) -> SubscriptionResponse:
    return SubscriptionResponse(
        id=subscription.id,
        merchant=subscription.merchant,
        customer=subscription.customer,
        description=subscription.description,
        usd_amount=from_fixed_point(subscription.usd_amount, container.settings.usd_decimals),
        interval_seconds=subscription.interval_seconds,
        next_payment_at=subscription.next_payment_at,
        status=subscription.status,
        max_payments=subscription.max_payments,
        payment_count=subscription.payment_count,
        auto_renew=subscription.auto_renew,
        created_at=subscription.created_at,
        cancelled_at=subscription.cancelled_at,
        completed_at=subscription.completed_at,
    )


def _affiliate_out(affiliate: Affiliate, container: PaymentsContainer) -> AffiliateResponse:
    return AffiliateResponse(
        id=affiliate.id,
        wallet=affiliate.wallet,
        name=affiliate.name,
        referral_code=affiliate.referral_code,
        total_referrals=affiliate.total_referrals,
        total_volume=from_fixed_point(affiliate.total_volume, container.settings.token_decimals),
        tier=affiliate.tier,
        created_at=affiliate.created_at,
    )


# ------------------------------------------------------------------ #
# Comercios
# ------------------------------------------------------------------ #
@merchants_router.post("", response_model=MerchantCredentialsResponse, status_code=status.HTTP_201_CREATED)
async def register_merchant_route(
    body: MerchantCreateRequest,
    container: PaymentsContainer = Depends(get_container),
) -> MerchantCredentialsResponse:
    merchant, api_key = await container.merchants.register_merchant(
        body.name,
        body.wallet_address,
        webhook_url=body.webhook_url,
        email=body.email,
    )
    return MerchantCredentialsResponse(
        **MerchantResponse.model_validate(merchant).model_dump(),
        api_key=api_key,
        webhook_secret=merchant.webhook_secret,
    )


@merchants_router.get("/me", response_model=MerchantResponse)
async def get_me_route(merchant: Merchant = Depends(require_merchant)) -> MerchantResponse:
    return MerchantResponse.model_validate(merchant)


@merchants_router.post("/me/api-key", response_model=MerchantCredentialsResponse)
async def rotate_api_key_route(
    merchant: Merchant = Depends(require_merchant),
    container: PaymentsContainer = Depends(get_container),
) -> MerchantCredentialsResponse:
    merchant, api_key = await container.merchants.rotate_api_key(merchant.id)
    return MerchantCredentialsResponse(
        **MerchantResponse.model_validate(merchant).model_dump(),
        api_key=api_key,
    )


@merchants_router.patch("/me/webhook", response_model=MerchantCredentialsResponse)
async def update_webhook_route(
    body: WebhookUpdateRequest,
    merchant: Merchant = Depends(require_merchant),
    container: PaymentsContainer = Depends(get_container),
) -> MerchantCredentialsResponse:
    merchant = await container.merchants.update_webhook(merchant.id, body.webhook_url)
    return MerchantCredentialsResponse(
        **MerchantResponse.model_validate(merchant).model_dump(),
        webhook_secret=merchant.webhook_secret,
    )


# ------------------------------------------------------------------ #
# Suscripciones
# ------------------------------------------------------------------ #
@subscriptions_router.post("", response_model=SubscriptionResponse, status_code=status.HTTP_201_CREATED)
async def create_subscription_route(
    body: SubscriptionCreateRequest,
    merchant: Merchant = Depends(require_merchant),
    container: PaymentsContainer = Depends(get_container),
) -> SubscriptionResponse:
    subscription = await container.subscriptions.create_subscription(
        merchant.wallet_address,
        body.customer,
        body.usd_amount,
        body.interval_days,
        max_payments=body.max_payments,
        auto_renew=body.auto_renew,
        description=body.description,
    )
    return _subscription_out(subscription, container)


@subscriptions_router.get("/{subscription_id}", response_model=SubscriptionResponse)
async def get_subscription_route(
    subscription_id: int,
    container: PaymentsContainer = Depends(get_container),
) -> SubscriptionResponse:
    subscription = await container.subscriptions.get_subscription(subscription_id)
    return _subscription_out(subscription, container)


@subscriptions_router.post("/{subscription_id}/cancel", response_model=SubscriptionResponse)
async def cancel_subscription_route(
    subscription_id: int,
    body: CallerRequest,
    container: PaymentsContainer = Depends(get_container),
) -> SubscriptionResponse:
    subscription = await container.subscriptions.cancel_subscription(subscription_id, body.caller)
    return _subscription_out(subscription, container)


# ------------------------------------------------------------------ #
# Afiliados
# ------------------------------------------------------------------ #
@affiliates_router.post("", response_model=AffiliateResponse, status_code=status.HTTP_201_CREATED)
async def register_affiliate_route(
    body: AffiliateCreateRequest,
    container: PaymentsContainer = Depends(get_container),
) -> AffiliateResponse:
    affiliate = await container.affiliates.register_affiliate(body.wallet, body.name)
    return _affiliate_out(affiliate, container)


@affiliates_router.get("/code/{code}", response_model=AffiliateResponse)
async def get_affiliate_by_code_route(
    code: str,
    container: PaymentsContainer = Depends(get_container),
) -> AffiliateResponse:
    affiliate = await container.affiliates.get_affiliate_by_code(code)
    return _affiliate_out(affiliate, container)


@affiliates_router.get("/{wallet}", response_model=AffiliateResponse)
async def get_affiliate_route(
    wallet: str,
    container: PaymentsContainer = Depends(get_container),
) -> AffiliateResponse:
    affiliate = await container.affiliates.get_affiliate(wallet)
    return _affiliate_out(affiliate, container)


# ------------------------------------------------------------------ #
# Webhooks
# ------------------------------------------------------------------ #
@webhooks_router.get("/failed", response_model=List[WebhookEventResponse])
async def list_failed_webhooks_route(
    limit: int = Query(default=100, ge=1, le=500),
    merchant: Merchant = Depends(require_merchant),
    container: PaymentsContainer = Depends(get_container),
) -> List[WebhookEventResponse]:
    events = await container.dispatcher.list_failed(merchant.wallet_address, limit)
    return [WebhookEventResponse.model_validate(e) for e in events]


@webhooks_router.post("/{event_id}/redeliver", response_model=WebhookEventResponse)
async def redeliver_webhook_route(
    event_id: int,
    merchant: Merchant = Depends(require_merchant),
    container: PaymentsContainer = Depends(get_container),
) -> WebhookEventResponse:
    event = await container.dispatcher.redeliver(event_id, merchant.wallet_address)
    return WebhookEventResponse.model_validate(event)


# Fin del archivo pylinks/modules/payments/routes/accounts.py
