# -*- coding: utf-8 -*-
"""
pylinks/shared/utils/keyed_lock.py

Locks asyncio por clave (p. ej. por payment_id).

Serializa dentro del proceso las transiciones sobre un mismo registro. Entre
procesos la exclusión la dan SELECT ... FOR UPDATE y la columna de versión.

Autor: PyLinks
Fecha: 2026-10-03
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Hashable


class _Entry:
    __slots__ = ("lock", "holders")

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.holders = 0


class KeyedLock:
    """Un asyncio.Lock por clave, liberado cuando nadie lo espera."""

    def __init__(self) -> None:
        self._entries: Dict[Hashable, _Entry] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        entry = self._entries.get(key)
        if entry is None:
            entry = self._entries[key] = _Entry()
        entry.holders += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.holders -= 1
            if entry.holders == 0:
                self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["KeyedLock"]
