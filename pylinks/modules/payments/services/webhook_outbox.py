# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/services/webhook_outbox.py

Escritura de eventos de webhook en el outbox.

Se invoca dentro de la transacción del ledger: el evento queda persistido
si y solo si la transición se confirma. No hace I/O de red.

Autor: PyLinks
Fecha: 2026-10-05
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from pylinks.shared.config import PyLinksSettings
from pylinks.modules.payments.enums import (
    PaymentStatus,
    PaymentType,
    WebhookEventStatus,
    WebhookEventType,
)
from pylinks.modules.payments.models import PaymentRecord, WebhookEvent
from pylinks.modules.payments.repositories import MerchantRepository
from pylinks.modules.payments.schemas.webhook_payload_schemas import (
    CreditData,
    EscrowEventData,
    PaymentEventData,
    WebhookPayload,
)
from pylinks.modules.payments.utils.amounts import from_fixed_point
from pylinks.modules.payments.utils.signatures import sign_payload

logger = logging.getLogger(__name__)

_PAYMENT_EVENTS = {
    PaymentStatus.PAID: WebhookEventType.PAYMENT_PAID,
    PaymentStatus.EXPIRED: WebhookEventType.PAYMENT_EXPIRED,
    PaymentStatus.CANCELLED: WebhookEventType.PAYMENT_CANCELLED,
    PaymentStatus.REFUNDED: WebhookEventType.PAYMENT_REFUNDED,
}

_ESCROW_EVENTS = {
    PaymentStatus.ESCROWED: WebhookEventType.ESCROW_FUNDED,
    PaymentStatus.PAID: WebhookEventType.ESCROW_RELEASED,
    PaymentStatus.DISPUTED: WebhookEventType.ESCROW_DISPUTED,
    PaymentStatus.REFUNDED: WebhookEventType.ESCROW_REFUNDED,
    PaymentStatus.EXPIRED: WebhookEventType.PAYMENT_EXPIRED,
    PaymentStatus.CANCELLED: WebhookEventType.PAYMENT_CANCELLED,
}


def event_type_for(payment_type: PaymentType, status: PaymentStatus) -> Optional[WebhookEventType]:
    """Evento que notifica la llegada a `status`; None si no se notifica."""
    if payment_type is PaymentType.ESCROW:
        return _ESCROW_EVENTS.get(status)
    return _PAYMENT_EVENTS.get(status)


def build_payload(
    payment: PaymentRecord,
    event_type: WebhookEventType,
    *,
    event_uid: str,
    occurred_at: datetime,
    token_decimals: int,
    usd_decimals: int,
) -> WebhookPayload:
    common = dict(
        payment_id=payment.id,
        session_id=payment.session_id,
        merchant=payment.merchant,
        customer=payment.customer,
        amount=from_fixed_point(payment.amount, token_decimals),
        payment_type=payment.payment_type,
        status=payment.status,
        tx_hash=payment.tx_hash,
        credits=[
            CreditData(
                recipient=c.recipient,
                amount=from_fixed_point(c.amount, token_decimals),
                kind=c.kind,
            )
            for c in payment.credits
        ],
    )
    if event_type.is_escrow:
        escrow = payment.escrow
        data = EscrowEventData(
            **common,
            usd_amount=from_fixed_point(escrow.usd_amount, usd_decimals),
            oracle_price=from_fixed_point(escrow.oracle_price, usd_decimals),
            hold_until=escrow.hold_until,
            auto_release=escrow.auto_release,
            disputed=escrow.disputed,
            resolution=escrow.resolution,
        )
    else:
        data = PaymentEventData(**common)

    return WebhookPayload(id=event_uid, type=event_type, created_at=occurred_at, data=data)


class WebhookOutbox:
    """Encola eventos para el endpoint registrado del comercio."""

    def __init__(self, settings: PyLinksSettings):
        self.settings = settings
        self.merchant_repo = MerchantRepository()

    async def enqueue(
        self,
        session: AsyncSession,
        payment: PaymentRecord,
        now: datetime,
    ) -> Optional[WebhookEvent]:
        event_type = event_type_for(payment.payment_type, payment.status)
        if event_type is None:
            return None

        merchant = await self.merchant_repo.get_by_wallet(session, payment.merchant)
        if merchant is None or not merchant.webhook_url:
            logger.debug(f"[Webhook] Comercio {payment.merchant} sin endpoint; se omite {event_type}")
            return None

        event_uid = f"evt_{uuid.uuid4().hex}"
        payload = build_payload(
            payment,
            event_type,
            event_uid=event_uid,
            occurred_at=now,
            token_decimals=self.settings.token_decimals,
            usd_decimals=self.settings.usd_decimals,
        )
        body = payload.model_dump_json()
        secret = merchant.webhook_secret or self.settings.webhook_secret

        event = WebhookEvent(
            event_uid=event_uid,
            payment_id=payment.id,
            merchant=payment.merchant,
            event_type=event_type,
            target_url=merchant.webhook_url,
            payload=body,
            payload_signature=sign_payload(body, secret),
            status=WebhookEventStatus.PENDING,
            attempts=0,
            next_attempt_at=now,
            created_at=now,
        )
        session.add(event)
        logger.info(f"[Webhook] Evento {event_type} encolado para pago {payment.id}")
        return event


__all__ = ["WebhookOutbox", "event_type_for", "build_payload"]

# Fin del archivo pylinks/modules/payments/services/webhook_outbox.py
