# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/utils/splits.py

Reparto de un pago entre comisión de plataforma, destinatarios y comercio.

Reglas:
- fee = amount * fee_bps // 10000 (a la tesorería)
- cada split recibe net * bps // 10000
- el residuo de la división entera va al comercio
- la suma de los créditos es exactamente `amount`

Autor: PyLinks
Fecha: 2026-10-03
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from pylinks.modules.payments.enums import CreditKind
from pylinks.modules.payments.errors import InvalidSplits

BPS_DENOMINATOR = 10_000


@dataclass(frozen=True)
class SplitSpec:
    recipient: str
    bps: int


@dataclass(frozen=True)
class CreditLine:
    recipient: str
    amount: int
    kind: CreditKind


def validate_splits(splits: Sequence[SplitSpec]) -> None:
    """Lanza InvalidSplits si algún bps está fuera de rango o la suma excede 10000."""
    total = 0
    for position, split in enumerate(splits):
        if not split.recipient:
            raise InvalidSplits(f"Split #{position} sin destinatario")
        if isinstance(split.bps, bool) or not isinstance(split.bps, int):
            raise InvalidSplits(f"Split #{position}: bps debe ser entero")
        if not 0 <= split.bps <= BPS_DENOMINATOR:
            raise InvalidSplits(f"Split #{position}: bps {split.bps} fuera de [0, {BPS_DENOMINATOR}]")
        total += split.bps
    if total > BPS_DENOMINATOR:
        raise InvalidSplits(f"La suma de bps ({total}) excede {BPS_DENOMINATOR}")


def compute_credits(
    amount: int,
    splits: Sequence[SplitSpec],
    *,
    merchant: str,
    fee_bps: int = 0,
    treasury: Optional[str] = None,
) -> List[CreditLine]:
    """
    Calcula las líneas de crédito al liquidar un pago.

    Las líneas con monto cero se omiten salvo la del comercio cuando es la
    única (pago sin splits ni comisión).

    Examples:
        >>> lines = compute_credits(1000, [SplitSpec("0xb", 3333)], merchant="0xa")
        >>> [(l.recipient, l.amount) for l in lines]
        [('0xb', 333), ('0xa', 667)]
    """
    if amount < 0:
        raise ValueError("amount debe ser >= 0")
    validate_splits(splits)
    if not 0 <= fee_bps <= BPS_DENOMINATOR:
        raise InvalidSplits(f"Comisión de plataforma inválida: {fee_bps} bps")

    lines: List[CreditLine] = []

    fee = amount * fee_bps // BPS_DENOMINATOR
    if fee:
        if not treasury:
            raise InvalidSplits("Comisión configurada sin dirección de tesorería")
        lines.append(CreditLine(treasury, fee, CreditKind.FEE))

    net = amount - fee
    distributed = 0
    for split in splits:
        share = net * split.bps // BPS_DENOMINATOR
        if share:
            lines.append(CreditLine(split.recipient, share, CreditKind.SPLIT))
            distributed += share

    remainder = net - distributed
    if remainder or not lines:
        lines.append(CreditLine(merchant, remainder, CreditKind.MERCHANT))

    return lines


__all__ = [
    "BPS_DENOMINATOR",
    "SplitSpec",
    "CreditLine",
    "validate_splits",
    "compute_credits",
]

# Fin del archivo pylinks/modules/payments/utils/splits.py
