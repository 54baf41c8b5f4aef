# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/models/subscription_models.py

Suscripciones: cargos recurrentes en USD que generan pagos de tipo
`subscription` en cada intervalo.

Autor: PyLinks
Fecha: 2026-10-05
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from pylinks.shared.database.base import Base, BigIntPK, UTCDateTime
from pylinks.modules.payments.enums import SubscriptionStatus


class Subscription(Base):
    __tablename__ = "subscriptions"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    merchant: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    customer: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(500), nullable=False, default="")

    # USD a 8 decimales
    usd_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    interval_seconds: Mapped[int] = mapped_column(BigInteger, nullable=False)
    next_payment_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)

    status: Mapped[SubscriptionStatus] = mapped_column(
        SubscriptionStatus.as_db_enum(),
        nullable=False,
        default=SubscriptionStatus.ACTIVE,
    )

    # 0 = ilimitado
    max_payments: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    payment_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    auto_renew: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)


__all__ = ["Subscription"]
