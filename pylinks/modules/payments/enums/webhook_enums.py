# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/enums/webhook_enums.py

Tipos y estados de eventos de webhook salientes.

Autor: PyLinks
Fecha: 2026-10-04
"""

from enum import StrEnum

from sqlalchemy import Enum as SAEnum

from pylinks.shared.database.base import as_db_enum as _as_db_enum


class WebhookEventType(StrEnum):
    """Nombre del evento notificado al comercio (header X-PyLinks-Event)."""

    PAYMENT_PAID = "payment.paid"
    PAYMENT_EXPIRED = "payment.expired"
    PAYMENT_CANCELLED = "payment.cancelled"
    PAYMENT_REFUNDED = "payment.refunded"
    ESCROW_FUNDED = "escrow.funded"
    ESCROW_RELEASED = "escrow.released"
    ESCROW_DISPUTED = "escrow.disputed"
    ESCROW_REFUNDED = "escrow.refunded"

    __db_enum_name__ = "webhook_event_type_enum"

    @property
    def is_escrow(self) -> bool:
        return self.value.startswith("escrow.")

    @classmethod
    def as_db_enum(cls) -> SAEnum:
        return _as_db_enum(cls, name=cls.__db_enum_name__)


class WebhookEventStatus(StrEnum):
    PENDING = "pending"
    DELIVERED = "delivered"
    PERMANENTLY_FAILED = "permanently_failed"

    __db_enum_name__ = "webhook_event_status_enum"

    @classmethod
    def as_db_enum(cls) -> SAEnum:
        return _as_db_enum(cls, name=cls.__db_enum_name__)


__all__ = ["WebhookEventType", "WebhookEventStatus"]

# Fin del archivo pylinks/modules/payments/enums/webhook_enums.py
