# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/schemas/account_schemas.py

Schemas de comercios, suscripciones, afiliados y eventos de webhook.

Autor: PyLinks
Fecha: 2026-10-07
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from pylinks.modules.payments.enums import (
    AffiliateTier,
    SubscriptionStatus,
    WebhookEventStatus,
    WebhookEventType,
)


class MerchantCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=200)
    wallet_address: str = Field(..., min_length=1, max_length=64)
    webhook_url: Optional[str] = Field(default=None, max_length=2048)
    email: Optional[str] = Field(default=None, max_length=320)


class WebhookUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    webhook_url: Optional[str] = Field(default=None, max_length=2048)


class MerchantResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: Optional[str] = None
    wallet_address: str
    webhook_url: Optional[str] = None
    is_active: bool
    created_at: datetime


class MerchantCredentialsResponse(MerchantResponse):
    """Incluye valores en claro que solo se muestran una vez."""
    api_key: Optional[str] = None
    webhook_secret: Optional[str] = None


class SubscriptionCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    customer: str = Field(..., min_length=1, max_length=64)
    usd_amount: str = Field(..., description="Monto USD por cargo, texto decimal")
    interval_days: int = Field(..., ge=1)
    max_payments: int = Field(default=0, ge=0)
    auto_renew: bool = True
    description: str = Field(default="")


class SubscriptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    merchant: str
    customer: str
    description: str
    usd_amount: str
    interval_seconds: int
    next_payment_at: datetime
    status: SubscriptionStatus
    max_payments: int
    payment_count: int
    auto_renew: bool
    created_at: datetime
    cancelled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class AffiliateCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    wallet: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=200)


class AffiliateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    wallet: str
    name: str
    referral_code: str
    total_referrals: int
    total_volume: str
    tier: AffiliateTier
    created_at: datetime


class WebhookEventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_uid: str
    payment_id: int
    event_type: WebhookEventType
    target_url: str
    status: WebhookEventStatus
    attempts: int
    next_attempt_at: Optional[datetime] = None
    last_error: Optional[str] = None
    last_status_code: Optional[int] = None
    created_at: datetime
    delivered_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None


__all__ = [
    "MerchantCreateRequest",
    "WebhookUpdateRequest",
    "MerchantResponse",
    "MerchantCredentialsResponse",
    "SubscriptionCreateRequest",
    "SubscriptionResponse",
    "AffiliateCreateRequest",
    "AffiliateResponse",
    "WebhookEventResponse",
]

# Fin del archivo pylinks/modules/payments/schemas/account_schemas.py
