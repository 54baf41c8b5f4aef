# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/enums/__init__.py

Enums del módulo de pagos.

Autor: PyLinks
Fecha: 2026-10-03
"""

from .payment_status_enum import PaymentStatus, PaymentType, CreditKind
from .webhook_enums import WebhookEventType, WebhookEventStatus
from .misc_enums import (
    TransferStatus,
    TransferOutcome,
    AffiliateTier,
    SubscriptionStatus,
    DisputeOutcome,
)
from .payment_state_transitions import (
    REGULAR_STATE_TRANSITIONS,
    ESCROW_STATE_TRANSITIONS,
    VALID_STATE_TRANSITIONS,
    FUNDED_STATUS,
    get_allowed_transitions,
    is_valid_state_transition,
    validate_state_transition,
)

__all__ = [
    "PaymentStatus",
    "PaymentType",
    "CreditKind",
    "WebhookEventType",
    "WebhookEventStatus",
    "TransferStatus",
    "TransferOutcome",
    "AffiliateTier",
    "SubscriptionStatus",
    "DisputeOutcome",
    "REGULAR_STATE_TRANSITIONS",
    "ESCROW_STATE_TRANSITIONS",
    "VALID_STATE_TRANSITIONS",
    "FUNDED_STATUS",
    "get_allowed_transitions",
    "is_valid_state_transition",
    "validate_state_transition",
]
