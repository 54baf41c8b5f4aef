# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/schemas/payment_schemas.py

Schemas de request/response de pagos y escrow.

Los montos viajan como texto decimal normalizado (6 decimales para PYUSD,
8 para USD) y nunca como float.

Autor: PyLinks
Fecha: 2026-10-07
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from pylinks.modules.payments.enums import (
    CreditKind,
    DisputeOutcome,
    PaymentStatus,
    PaymentType,
)
from pylinks.modules.payments.models import PaymentRecord
from pylinks.modules.payments.utils.amounts import from_fixed_point
from pylinks.modules.payments.utils.splits import SplitSpec


# ------------------------------------------------------------------ #
# Requests
# ------------------------------------------------------------------ #
class SplitIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    recipient: str = Field(..., min_length=1, max_length=64)
    bps: int = Field(..., description="Basis points (0-10000)")

    def to_spec(self) -> SplitSpec:
        return SplitSpec(self.recipient, self.bps)


class PaymentCreateRequest(BaseModel):
    """createPayment."""
    model_config = ConfigDict(extra="forbid")

    amount: str = Field(..., description="Monto PYUSD en texto decimal, p. ej. '25.000000'")
    session_id: str = Field(..., min_length=1, max_length=128)
    description: str = Field(default="")
    splits: List[SplitIn] = Field(default_factory=list)
    customer: Optional[str] = Field(default=None, max_length=64)
    referral_code: Optional[str] = Field(default=None, max_length=32)


class EscrowCreateRequest(BaseModel):
    """createEscrowPayment."""
    model_config = ConfigDict(extra="forbid")

    customer: str = Field(..., min_length=1, max_length=64)
    usd_amount: str = Field(..., description="Monto USD en texto decimal, p. ej. '100.00000000'")
    session_id: str = Field(..., min_length=1, max_length=128)
    description: str = Field(default="")
    auto_release: bool = True


class CallerRequest(BaseModel):
    """Identidad del cliente provista por la capa de autenticación de wallets."""
    model_config = ConfigDict(extra="forbid")

    caller: str = Field(..., min_length=1, max_length=64)


class DisputeResolveRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    outcome: DisputeOutcome
    arbiter: str = Field(default="arbiter", min_length=1, max_length=64)


# ------------------------------------------------------------------ #
# Responses
# ------------------------------------------------------------------ #
class SplitOut(BaseModel):
    recipient: str
    bps: int


class CreditOut(BaseModel):
    recipient: str
    amount: str
    kind: CreditKind


class EscrowOut(BaseModel):
    usd_amount: str
    oracle_price: str
    hold_until: datetime
    auto_release: bool
    disputed: bool
    disputed_by: Optional[str] = None
    disputed_at: Optional[datetime] = None
    resolution: Optional[DisputeOutcome] = None
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = None
    released_by: Optional[str] = None


class PaymentResponse(BaseModel):
    id: int
    merchant: str
    customer: Optional[str] = None
    pay_to: str
    amount: str
    amount_units: int
    session_id: str
    description: str
    payment_type: PaymentType
    status: PaymentStatus
    created_at: datetime
    expires_at: datetime
    funded_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    expired_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    refunded_at: Optional[datetime] = None
    tx_hash: Optional[str] = None
    block_number: Optional[int] = None
    referral_code: Optional[str] = None
    subscription_id: Optional[int] = None
    splits: List[SplitOut] = Field(default_factory=list)
    credits: List[CreditOut] = Field(default_factory=list)
    escrow: Optional[EscrowOut] = None

    @classmethod
    def from_record(
        cls,
        payment: PaymentRecord,
        *,
        token_decimals: int,
        usd_decimals: int,
    ) -> "PaymentResponse":
        escrow = None
        if payment.escrow is not None:
            e = payment.escrow
            escrow = EscrowOut(
                usd_amount=from_fixed_point(e.usd_amount, usd_decimals),
                oracle_price=from_fixed_point(e.oracle_price, usd_decimals),
                hold_until=e.hold_until,
                auto_release=e.auto_release,
                disputed=e.disputed,
                disputed_by=e.disputed_by,
                disputed_at=e.disputed_at,
                resolution=e.resolution,
                resolved_by=e.resolved_by,
                resolved_at=e.resolved_at,
                released_by=e.released_by,
            )
        return cls(
            id=payment.id,
            merchant=payment.merchant,
            customer=payment.customer,
            pay_to=payment.pay_to,
            amount=from_fixed_point(payment.amount, token_decimals),
            amount_units=payment.amount,
            session_id=payment.session_id,
            description=payment.description,
            payment_type=payment.payment_type,
            status=payment.status,
            created_at=payment.created_at,
            expires_at=payment.expires_at,
            funded_at=payment.funded_at,
            paid_at=payment.paid_at,
            expired_at=payment.expired_at,
            cancelled_at=payment.cancelled_at,
            refunded_at=payment.refunded_at,
            tx_hash=payment.tx_hash,
            block_number=payment.block_number,
            referral_code=payment.referral_code,
            subscription_id=payment.subscription_id,
            splits=[SplitOut(recipient=s.recipient, bps=s.bps) for s in payment.splits],
            credits=[
                CreditOut(
                    recipient=c.recipient,
                    amount=from_fixed_point(c.amount, token_decimals),
                    kind=c.kind,
                )
                for c in payment.credits
            ],
            escrow=escrow,
        )


class PaymentListResponse(BaseModel):
    items: List[PaymentResponse]
    limit: int
    offset: int


class SettlementResponse(BaseModel):
    payment_id: int
    status: PaymentStatus
    recipient: Optional[str]
    amount: str
    usd_amount: str
    oracle_price: str
    resolution: Optional[DisputeOutcome] = None
    settled_at: Optional[datetime] = None


__all__ = [
    "SplitIn",
    "PaymentCreateRequest",
    "EscrowCreateRequest",
    "CallerRequest",
    "DisputeResolveRequest",
    "SplitOut",
    "CreditOut",
    "EscrowOut",
    "PaymentResponse",
    "PaymentListResponse",
    "SettlementResponse",
]

# Fin del archivo pylinks/modules/payments/schemas/payment_schemas.py
