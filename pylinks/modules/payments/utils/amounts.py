# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/utils/amounts.py

Normalizador de montos: texto decimal <-> entero de punto fijo.

Precisiones usadas en PyLinks:
- PYUSD (token de liquidación): 6 decimales
- USD del oráculo y precios:     8 decimales

Toda la aritmética es entera; nunca se usa float.

Autor: PyLinks
Fecha: 2026-10-03
"""

from __future__ import annotations

import re

from pylinks.modules.payments.errors import InvalidAmount, PriceUnavailable

TOKEN_DECIMALS = 6
USD_DECIMALS = 8
PRICE_DECIMALS = 8

_DECIMAL_RE = re.compile(r"^([0-9]+)(?:\.([0-9]+))?$")


def to_fixed_point(text: str, precision: int) -> int:
    """
    Convierte un decimal no negativo en texto a entero de punto fijo.

    Ceros finales más allá de la precisión se aceptan ("1.5000000" a 6
    decimales); cualquier otro dígito significativo extra es InvalidAmount,
    nunca se redondea.

    Examples:
        >>> to_fixed_point("25.000000", 6)
        25000000
        >>> to_fixed_point("0.1", 6)
        100000
    """
    if precision < 0:
        raise ValueError("precision debe ser >= 0")
    if not isinstance(text, str):
        raise InvalidAmount(text, precision, "se esperaba un decimal en texto")

    match = _DECIMAL_RE.match(text)
    if match is None:
        raise InvalidAmount(text, precision, "no es un decimal no negativo")

    whole, frac = match.group(1), match.group(2) or ""
    if len(frac) > precision:
        if frac[precision:].strip("0"):
            raise InvalidAmount(text, precision)
        frac = frac[:precision]

    scale = 10 ** precision
    return int(whole) * scale + (int(frac.ljust(precision, "0")) if precision else 0)


def from_fixed_point(value: int, precision: int) -> str:
    """
    Inversa total de to_fixed_point: siempre `precision` decimales.

    Examples:
        >>> from_fixed_point(25000000, 6)
        '25.000000'
        >>> from_fixed_point(7, 0)
        '7'
    """
    if precision < 0:
        raise ValueError("precision debe ser >= 0")
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidAmount(value, precision, "se esperaba un entero no negativo")

    if precision == 0:
        return str(value)
    whole, frac = divmod(value, 10 ** precision)
    return f"{whole}.{frac:0{precision}d}"


def normalize_decimal(text: str, precision: int) -> str:
    """Forma normalizada de un decimal a la precisión dada."""
    return from_fixed_point(to_fixed_point(text, precision), precision)


def usd_to_token_units(
    usd_units: int,
    price_units: int,
    *,
    usd_decimals: int = USD_DECIMALS,
    token_decimals: int = TOKEN_DECIMALS,
    price_decimals: int = PRICE_DECIMALS,
) -> int:
    """
    Convierte USD (punto fijo) a unidades del token usando el precio del oráculo.

    Redondea hacia arriba: el comercio nunca recibe menos que el monto USD
    cotizado.

    Examples:
        >>> usd_to_token_units(100 * 10**8, 10**8)
        100000000
    """
    if price_units <= 0:
        raise PriceUnavailable("El oráculo devolvió un precio no positivo")
    if usd_units < 0:
        raise InvalidAmount(usd_units, usd_decimals, "monto USD negativo")

    numerator = usd_units * 10 ** token_decimals * 10 ** price_decimals
    denominator = price_units * 10 ** usd_decimals
    return -(-numerator // denominator)


__all__ = [
    "TOKEN_DECIMALS",
    "USD_DECIMALS",
    "PRICE_DECIMALS",
    "to_fixed_point",
    "from_fixed_point",
    "normalize_decimal",
    "usd_to_token_units",
]

# Fin del archivo pylinks/modules/payments/utils/amounts.py
