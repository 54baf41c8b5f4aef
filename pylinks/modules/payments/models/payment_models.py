# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/models/payment_models.py

Modelos ORM del ledger de pagos:
- PaymentRecord: estado autoritativo de cada pago
- PaymentSplit:  reparto ordenado (recipient, bps)
- CreditEntry:   montos acreditados al liquidar (Σ == amount)
- SessionCredit: un sessionId se acredita a lo sumo una vez (global)

Los registros nunca se borran.

Autor: PyLinks
Fecha: 2026-10-03
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    BigInteger,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pylinks.shared.database.base import Base, BigIntPK, UTCDateTime
from pylinks.modules.payments.enums import CreditKind, PaymentStatus, PaymentType

if TYPE_CHECKING:
    from .escrow_models import EscrowDetails


class PaymentRecord(Base):
    """Pago registrado en el ledger (regular, escrow o suscripción)."""

    __tablename__ = "payment_records"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)

    merchant: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
        doc="Identificador del comercio receptor (wallet en minúsculas).",
    )

    customer: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        doc="Pagador; desconocido hasta observar la transferencia en pagos regulares.",
    )

    pay_to: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        doc="Destinatario esperado de la transferencia on-chain.",
    )

    # Monto en unidades del token (6 decimales)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)

    session_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)

    description: Mapped[str] = mapped_column(String(500), nullable=False, default="")

    payment_type: Mapped[PaymentType] = mapped_column(
        PaymentType.as_db_enum(),
        nullable=False,
    )

    status: Mapped[PaymentStatus] = mapped_column(
        PaymentStatus.as_db_enum(),
        nullable=False,
        index=True,
    )

    referral_code: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)

    subscription_id: Mapped[Optional[int]] = mapped_column(
        BigInteger,
        ForeignKey("subscriptions.id"),
        nullable=True,
        index=True,
    )

    # Datos de la transferencia que liquidó el pago
    tx_hash: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)
    block_number: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    funded_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    paid_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    expired_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    refunded_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    # Control de concurrencia optimista
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    splits: Mapped[List["PaymentSplit"]] = relationship(
        "PaymentSplit",
        back_populates="payment",
        cascade="all, delete-orphan",
        order_by="PaymentSplit.position",
        lazy="selectin",
    )

    credits: Mapped[List["CreditEntry"]] = relationship(
        "CreditEntry",
        back_populates="payment",
        cascade="all, delete-orphan",
        order_by="CreditEntry.id",
        lazy="selectin",
    )

    escrow: Mapped[Optional["EscrowDetails"]] = relationship(
        "EscrowDetails",
        back_populates="payment",
        cascade="all, delete-orphan",
        uselist=False,
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        UniqueConstraint("merchant", "session_id", name="uq_payment_records_merchant_session"),
        Index("ix_payment_records_status_expires_at", "status", "expires_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<PaymentRecord id={self.id} type={self.payment_type} "
            f"status={self.status} amount={self.amount} session={self.session_id!r}>"
        )


class PaymentSplit(Base):
    __tablename__ = "payment_splits"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    payment_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("payment_records.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    recipient: Mapped[str] = mapped_column(String(64), nullable=False)
    bps: Mapped[int] = mapped_column(Integer, nullable=False)

    payment: Mapped["PaymentRecord"] = relationship("PaymentRecord", back_populates="splits")


class CreditEntry(Base):
    """Monto acreditado a un destinatario cuando el pago llega a paid."""

    __tablename__ = "payment_credits"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    payment_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("payment_records.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    recipient: Mapped[str] = mapped_column(String(64), nullable=False)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    kind: Mapped[CreditKind] = mapped_column(CreditKind.as_db_enum(), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    payment: Mapped["PaymentRecord"] = relationship("PaymentRecord", back_populates="credits")


class SessionCredit(Base):
    """Marca de acreditación: la PK garantiza una sola liquidación por sessionId."""

    __tablename__ = "credited_sessions"

    session_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    payment_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("payment_records.id"),
        nullable=False,
    )
    credited_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)


__all__ = ["PaymentRecord", "PaymentSplit", "CreditEntry", "SessionCredit"]

# Fin del archivo pylinks/modules/payments/models/payment_models.py
