# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/models/transfer_models.py

Transferencias ERC-20 observadas por el tracker de confirmaciones.

La clave única (tx_hash, log_index) hace idempotente la observación incluso
entre reinicios.

Autor: PyLinks
Fecha: 2026-10-04
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from pylinks.shared.database.base import Base, BigIntPK, UTCDateTime
from pylinks.modules.payments.enums import TransferStatus


class ObservedTransfer(Base):
    __tablename__ = "observed_transfers"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)

    tx_hash: Mapped[str] = mapped_column(String(80), nullable=False)
    log_index: Mapped[int] = mapped_column(Integer, nullable=False)

    sender: Mapped[str] = mapped_column(String(64), nullable=False)
    recipient: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    reference: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    block_number: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)

    status: Mapped[TransferStatus] = mapped_column(
        TransferStatus.as_db_enum(),
        nullable=False,
        index=True,
        default=TransferStatus.PENDING,
    )
    outcome: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    payment_id: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)

    observed_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    processed_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    __table_args__ = (
        UniqueConstraint("tx_hash", "log_index", name="uq_observed_transfers_tx_log"),
    )


__all__ = ["ObservedTransfer"]

# Fin del archivo pylinks/modules/payments/models/transfer_models.py
