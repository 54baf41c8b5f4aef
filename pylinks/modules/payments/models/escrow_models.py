# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/models/escrow_models.py

Datos de escrow (1:1 con un PaymentRecord de tipo escrow).

El precio del oráculo se captura una sola vez al crear el pago y no se
vuelve a consultar al liberar: la liquidación usa siempre `oracle_price`.

Autor: PyLinks
Fecha: 2026-10-03
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import BigInteger, Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pylinks.shared.database.base import Base, UTCDateTime
from pylinks.modules.payments.enums import DisputeOutcome

if TYPE_CHECKING:
    from .payment_models import PaymentRecord


class EscrowDetails(Base):
    __tablename__ = "escrow_details"

    payment_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("payment_records.id", ondelete="CASCADE"),
        primary_key=True,
    )

    # USD a 8 decimales y precio del token a 8 decimales
    usd_amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    oracle_price: Mapped[int] = mapped_column(BigInteger, nullable=False)

    hold_until: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, index=True)

    auto_release: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    disputed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    disputed_by: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    disputed_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    resolution: Mapped[Optional[DisputeOutcome]] = mapped_column(
        DisputeOutcome.as_db_enum(),
        nullable=True,
    )
    resolved_by: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    released_by: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        doc="Cliente, 'auto-release' o el árbitro.",
    )

    payment: Mapped["PaymentRecord"] = relationship("PaymentRecord", back_populates="escrow")


__all__ = ["EscrowDetails"]

# Fin del archivo pylinks/modules/payments/models/escrow_models.py
