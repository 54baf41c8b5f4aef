# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/enums/misc_enums.py

Enums de transferencias observadas, afiliados, suscripciones y escrow.

Autor: PyLinks
Fecha: 2026-10-04
"""

from enum import StrEnum

from sqlalchemy import Enum as SAEnum

from pylinks.shared.database.base import as_db_enum as _as_db_enum


class _DbEnumMixin:
    @classmethod
    def as_db_enum(cls) -> SAEnum:
        return _as_db_enum(cls, name=cls.__db_enum_name__)  # type: ignore[attr-defined]


class TransferStatus(_DbEnumMixin, StrEnum):
    """Estado de una transferencia on-chain observada por el tracker."""

    PENDING = "pending"      # vista, esperando confirmaciones
    APPLIED = "applied"      # acreditó un pago
    REJECTED = "rejected"    # confirmada pero sin pago válido (expirado, sin match...)
    ORPHANED = "orphaned"    # desapareció por reorg antes de confirmarse

    __db_enum_name__ = "transfer_status_enum"


class TransferOutcome(StrEnum):
    """Resultado de aplicar una transferencia confirmada al ledger."""

    APPLIED = "applied"
    NO_MATCH = "no_match"
    EXPIRED = "expired"
    DUPLICATE_SESSION = "duplicate_session"
    NOT_PENDING = "not_pending"


class AffiliateTier(_DbEnumMixin, StrEnum):
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    DIAMOND = "diamond"

    __db_enum_name__ = "affiliate_tier_enum"


class SubscriptionStatus(_DbEnumMixin, StrEnum):
    ACTIVE = "active"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

    __db_enum_name__ = "subscription_status_enum"


class DisputeOutcome(_DbEnumMixin, StrEnum):
    """Resolución manual de una disputa de escrow."""

    RELEASE = "release"   # fondos al comercio (paid)
    REFUND = "refund"     # fondos al cliente (refunded)

    __db_enum_name__ = "dispute_outcome_enum"


__all__ = [
    "TransferStatus",
    "TransferOutcome",
    "AffiliateTier",
    "SubscriptionStatus",
    "DisputeOutcome",
]

# Fin del archivo pylinks/modules/payments/enums/misc_enums.py
