# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/utils/affiliate_tiers.py

Nivel de afiliado como función pura del volumen referido (unidades PYUSD).

Autor: PyLinks
Fecha: 2026-10-04
"""

from typing import List, Tuple

from pylinks.modules.payments.enums import AffiliateTier
from pylinks.modules.payments.utils.amounts import TOKEN_DECIMALS

_UNIT = 10 ** TOKEN_DECIMALS

# Umbrales mínimos de volumen, de mayor a menor
TIER_THRESHOLDS: List[Tuple[int, AffiliateTier]] = [
    (10_000 * _UNIT, AffiliateTier.DIAMOND),
    (5_000 * _UNIT, AffiliateTier.GOLD),
    (1_000 * _UNIT, AffiliateTier.SILVER),
]


def tier_for_volume(total_volume: int) -> AffiliateTier:
    """
    Examples:
        >>> tier_for_volume(999_999_999)
        <AffiliateTier.BRONZE: 'bronze'>
        >>> tier_for_volume(1_000_000_000)
        <AffiliateTier.SILVER: 'silver'>
    """
    for threshold, tier in TIER_THRESHOLDS:
        if total_volume >= threshold:
            return tier
    return AffiliateTier.BRONZE


__all__ = ["TIER_THRESHOLDS", "tier_for_volume"]
