# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/schemas/webhook_payload_schemas.py

Esquema cerrado de los cuerpos de webhook salientes.

Dos formas de `data`:
- PaymentEventData para eventos payment.*
- EscrowEventData  para eventos escrow.* (incluye datos del escrow)

Campos desconocidos o una forma que no corresponde al tipo de evento se
rechazan (extra="forbid").

Autor: PyLinks
Fecha: 2026-10-04
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from pylinks.modules.payments.enums import (
    CreditKind,
    DisputeOutcome,
    PaymentStatus,
    PaymentType,
    WebhookEventType,
)


class _Closed(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class CreditData(_Closed):
    recipient: str
    amount: str
    kind: CreditKind


class PaymentEventData(_Closed):
    payment_id: int
    session_id: str
    merchant: str
    customer: Optional[str] = None
    amount: str = Field(..., description="Monto PYUSD con 6 decimales")
    payment_type: PaymentType
    status: PaymentStatus
    tx_hash: Optional[str] = None
    credits: List[CreditData] = Field(default_factory=list)


class EscrowEventData(PaymentEventData):
    usd_amount: str = Field(..., description="Monto USD con 8 decimales")
    oracle_price: str
    hold_until: datetime
    auto_release: bool
    disputed: bool
    resolution: Optional[DisputeOutcome] = None


class WebhookPayload(_Closed):
    id: str
    type: WebhookEventType
    created_at: datetime
    data: Union[EscrowEventData, PaymentEventData]

    @model_validator(mode="after")
    def _data_matches_type(self) -> "WebhookPayload":
        is_escrow_data = isinstance(self.data, EscrowEventData)
        if self.type.is_escrow and not is_escrow_data:
            raise ValueError(f"El evento {self.type.value} requiere datos de escrow")
        if not self.type.is_escrow and is_escrow_data:
            raise ValueError(f"El evento {self.type.value} no admite datos de escrow")
        return self


__all__ = ["CreditData", "PaymentEventData", "EscrowEventData", "WebhookPayload"]

# Fin del archivo pylinks/modules/payments/schemas/webhook_payload_schemas.py
