# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/repositories/__init__.py

Repositorios del módulo de pagos.
"""

from .payment_repository import PaymentRepository, SessionCreditRepository
from .transfer_repository import TransferRepository
from .webhook_event_repository import WebhookEventRepository
from .account_repositories import MerchantRepository, AffiliateRepository, SubscriptionRepository

__all__ = [
    "PaymentRepository",
    "SessionCreditRepository",
    "TransferRepository",
    "WebhookEventRepository",
    "MerchantRepository",
    "AffiliateRepository",
    "SubscriptionRepository",
]
