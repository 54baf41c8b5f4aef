# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/services/__init__.py

Servicios de dominio: ledger, escrow, confirmaciones, webhooks, comercios,
afiliados y suscripciones.
"""

from .webhook_outbox import WebhookOutbox, build_payload, event_type_for
from .ledger_service import EscrowTerms, LedgerService
from .escrow_service import EscrowService, EscrowSettlement
from .confirmation_tracker import ConfirmationTracker
from .webhook_dispatcher import WebhookDispatcher
from .merchant_service import MerchantService
from .affiliate_service import AffiliateService
from .subscription_service import SubscriptionService

__all__ = [
    "WebhookOutbox",
    "build_payload",
    "event_type_for",
    "EscrowTerms",
    "LedgerService",
    "EscrowService",
    "EscrowSettlement",
    "ConfirmationTracker",
    "WebhookDispatcher",
    "MerchantService",
    "AffiliateService",
    "SubscriptionService",
]
