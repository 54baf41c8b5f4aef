# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/enums/payment_status_enum.py

Enums del ciclo de vida de un pago: estado y tipo.

Autor: PyLinks
Fecha: 2026-10-03
"""

from enum import StrEnum

from sqlalchemy import Enum as SAEnum

from pylinks.shared.database.base import as_db_enum as _as_db_enum


class PaymentStatus(StrEnum):
    """Estado del pago en el ledger."""

    CREATED = "created"
    PAID = "paid"
    EXPIRED = "expired"
    REFUNDED = "refunded"
    CANCELLED = "cancelled"
    ESCROWED = "escrowed"
    DISPUTED = "disputed"

    __db_enum_name__ = "payment_status_enum"

    @classmethod
    def as_db_enum(cls) -> SAEnum:
        return _as_db_enum(cls, name=cls.__db_enum_name__)


class PaymentType(StrEnum):
    """Tipo de pago: define qué mapa de transiciones aplica."""

    REGULAR = "regular"
    ESCROW = "escrow"
    SUBSCRIPTION = "subscription"

    __db_enum_name__ = "payment_type_enum"

    @classmethod
    def as_db_enum(cls) -> SAEnum:
        return _as_db_enum(cls, name=cls.__db_enum_name__)


class CreditKind(StrEnum):
    """Destino de una línea de crédito al liquidar un pago."""

    MERCHANT = "merchant"
    SPLIT = "split"
    FEE = "fee"

    __db_enum_name__ = "credit_kind_enum"

    @classmethod
    def as_db_enum(cls) -> SAEnum:
        return _as_db_enum(cls, name=cls.__db_enum_name__)


__all__ = ["PaymentStatus", "PaymentType", "CreditKind"]

# Fin del archivo pylinks/modules/payments/enums/payment_status_enum.py
