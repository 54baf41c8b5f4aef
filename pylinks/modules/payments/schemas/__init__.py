# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/schemas/__init__.py

Schemas Pydantic del módulo de pagos: API HTTP y cuerpos de webhook.
"""

from .webhook_payload_schemas import (
    CreditData,
    EscrowEventData,
    PaymentEventData,
    WebhookPayload,
)
from .payment_schemas import (
    CallerRequest,
    DisputeResolveRequest,
    EscrowCreateRequest,
    PaymentCreateRequest,
    PaymentListResponse,
    PaymentResponse,
    SettlementResponse,
    SplitIn,
)
from .account_schemas import (
    AffiliateCreateRequest,
    AffiliateResponse,
    MerchantCreateRequest,
    MerchantCredentialsResponse,
    MerchantResponse,
    SubscriptionCreateRequest,
    SubscriptionResponse,
    WebhookEventResponse,
    WebhookUpdateRequest,
)

__all__ = [
    "CreditData",
    "EscrowEventData",
    "PaymentEventData",
    "WebhookPayload",
    "CallerRequest",
    "DisputeResolveRequest",
    "EscrowCreateRequest",
    "PaymentCreateRequest",
    "PaymentListResponse",
    "PaymentResponse",
    "SettlementResponse",
    "SplitIn",
    "AffiliateCreateRequest",
    "AffiliateResponse",
    "MerchantCreateRequest",
    "MerchantCredentialsResponse",
    "MerchantResponse",
    "SubscriptionCreateRequest",
    "SubscriptionResponse",
    "WebhookEventResponse",
    "WebhookUpdateRequest",
]
