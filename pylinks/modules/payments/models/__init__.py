# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/models/__init__.py

Registra todos los modelos ORM del módulo en Base.metadata.
"""

from .payment_models import PaymentRecord, PaymentSplit, CreditEntry, SessionCredit
from .escrow_models import EscrowDetails
from .transfer_models import ObservedTransfer
from .webhook_event_models import WebhookEvent
from .merchant_models import Merchant
from .affiliate_models import Affiliate
from .subscription_models import Subscription

__all__ = [
    "PaymentRecord",
    "PaymentSplit",
    "CreditEntry",
    "SessionCredit",
    "EscrowDetails",
    "ObservedTransfer",
    "WebhookEvent",
    "Merchant",
    "Affiliate",
    "Subscription",
]
