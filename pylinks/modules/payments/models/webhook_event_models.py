# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/models/webhook_event_models.py

Outbox de webhooks salientes.

El ledger inserta el evento en la misma transacción que la transición; el
dispatcher lo entrega después. `payload` es exactamente el cuerpo enviado y
`payload_signature` su HMAC-SHA256.

Autor: PyLinks
Fecha: 2026-10-04
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, Integer, String, Text, Index
from sqlalchemy.orm import Mapped, mapped_column

from pylinks.shared.database.base import Base, BigIntPK, UTCDateTime
from pylinks.modules.payments.enums import WebhookEventStatus, WebhookEventType


class WebhookEvent(Base):
    __tablename__ = "webhook_events"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)

    event_uid: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        doc="Identificador público del evento (X-PyLinks-Delivery).",
    )

    payment_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    merchant: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    event_type: Mapped[WebhookEventType] = mapped_column(
        WebhookEventType.as_db_enum(),
        nullable=False,
    )

    target_url: Mapped[str] = mapped_column(String(2048), nullable=False)
    payload: Mapped[str] = mapped_column(Text, nullable=False)
    payload_signature: Mapped[str] = mapped_column(String(128), nullable=False)

    status: Mapped[WebhookEventStatus] = mapped_column(
        WebhookEventStatus.as_db_enum(),
        nullable=False,
        default=WebhookEventStatus.PENDING,
    )
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    next_attempt_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    last_error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    last_status_code: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    delivered_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    failed_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    __table_args__ = (
        Index("ix_webhook_events_status_next_attempt", "status", "next_attempt_at"),
    )


__all__ = ["WebhookEvent"]

# Fin del archivo pylinks/modules/payments/models/webhook_event_models.py
