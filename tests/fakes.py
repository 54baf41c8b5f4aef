# -*- coding: utf-8 -*-
"""
tests/fakes.py

Dobles de prueba compartidos: reloj congelado, cadena en memoria y
receptor de webhooks.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List, Optional

import httpx

from pylinks.modules.payments.adapters import ChainSourceError, ChainTransfer

# Direcciones de prueba (ya en minúsculas, como las guarda el ledger)
MERCHANT = "0x" + "a" * 40
PARTNER = "0x" + "b" * 40
CUSTOMER = "0x" + "c" * 40
AFFILIATE = "0x" + "d" * 40
STRANGER = "0x" + "e" * 40

WEBHOOK_URL = "https://shop.example/webhooks/pylinks"
FROZEN_START = datetime(2026, 10, 1, 12, 0, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Reloj controlado por el test; avanza solo con advance()."""

    def __init__(self, start: datetime = FROZEN_START):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class FakeTransferSource:
    """Cadena en memoria: el test fija la cabeza y las transferencias visibles."""

    def __init__(self):
        self.head = 0
        self.transfers: List[ChainTransfer] = []
        self.fail = False

    async def get_block_number(self) -> int:
        if self.fail:
            raise ChainSourceError("eth_blockNumber falló")
        return self.head

    async def get_transfers(self, from_block: int, to_block: int) -> List[ChainTransfer]:
        return [t for t in self.transfers if from_block <= t.block_number <= to_block]


class WebhookReceiver:
    """Endpoint del comercio simulado; responde con `status_code`."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.status_code = 200

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json={"received": True})


def make_transfer(
    reference: Optional[str],
    amount: int,
    *,
    block_number: int = 100,
    tx_hash: str = "0x" + "1" * 64,
    log_index: int = 0,
    recipient: str = MERCHANT,
    sender: str = CUSTOMER,
) -> ChainTransfer:
    return ChainTransfer(
        tx_hash=tx_hash,
        log_index=log_index,
        sender=sender,
        recipient=recipient,
        amount=amount,
        block_number=block_number,
        reference=reference,
    )


