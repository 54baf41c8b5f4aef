# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/models/affiliate_models.py

Afiliados y su programa de referidos.

`tier` es función pura de `total_volume`: se recalcula en cada asignación
del volumen, de modo que nunca queda inconsistente.

Autor: PyLinks
Fecha: 2026-10-04
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, validates

from pylinks.shared.database.base import Base, BigIntPK, UTCDateTime
from pylinks.modules.payments.enums import AffiliateTier
from pylinks.modules.payments.utils.affiliate_tiers import tier_for_volume


class Affiliate(Base):
    __tablename__ = "affiliates"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    wallet: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    referral_code: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)

    total_referrals: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_volume: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    tier: Mapped[AffiliateTier] = mapped_column(
        AffiliateTier.as_db_enum(),
        nullable=False,
        default=AffiliateTier.BRONZE,
    )

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    @validates("total_volume")
    def _sync_tier(self, key: str, value: int) -> int:
        self.tier = tier_for_volume(value)
        return value

    def record_referral(self, amount: int) -> None:
        """Suma un pago referido; el tier se recalcula vía el validador."""
        self.total_referrals = (self.total_referrals or 0) + 1
        self.total_volume = (self.total_volume or 0) + amount


__all__ = ["Affiliate"]
