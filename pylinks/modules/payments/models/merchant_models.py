# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/models/merchant_models.py

Comercios registrados: wallet receptora, API key (hash) y endpoint de webhooks.

Autor: PyLinks
Fecha: 2026-10-04
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from pylinks.shared.database.base import Base, BigIntPK, UTCDateTime


class Merchant(Base):
    __tablename__ = "merchants"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)

    wallet_address: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        doc="Identificador `merchant` de sus pagos.",
    )

    # sha256 de la API key; el valor en claro solo se muestra al emitirla
    api_key_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    webhook_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    webhook_secret: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)


__all__ = ["Merchant"]
