# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/adapters/__init__.py

Adaptadores a colaboradores externos: oráculo de precios y nodo RPC.
"""

from .price_oracle import PriceOracle, FixedPriceOracle, PythHermesPriceOracle
from .chain_source import (
    TRANSFER_TOPIC,
    ChainSourceError,
    ChainTransfer,
    TransferSource,
    JsonRpcTransferSource,
    decode_reference,
)

__all__ = [
    "PriceOracle",
    "FixedPriceOracle",
    "PythHermesPriceOracle",
    "TRANSFER_TOPIC",
    "ChainSourceError",
    "ChainTransfer",
    "TransferSource",
    "JsonRpcTransferSource",
    "decode_reference",
]
