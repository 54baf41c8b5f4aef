# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/utils/__init__.py

Utilidades puras del módulo de pagos (montos, repartos, firmas, credenciales).
"""

from .amounts import (
    TOKEN_DECIMALS,
    USD_DECIMALS,
    PRICE_DECIMALS,
    to_fixed_point,
    from_fixed_point,
    normalize_decimal,
    usd_to_token_units,
)
from .splits import BPS_DENOMINATOR, SplitSpec, CreditLine, validate_splits, compute_credits
from .signatures import sign_payload, verify_signature

__all__ = [
    "TOKEN_DECIMALS",
    "USD_DECIMALS",
    "PRICE_DECIMALS",
    "to_fixed_point",
    "from_fixed_point",
    "normalize_decimal",
    "usd_to_token_units",
    "BPS_DENOMINATOR",
    "SplitSpec",
    "CreditLine",
    "validate_splits",
    "compute_credits",
    "sign_payload",
    "verify_signature",
]
