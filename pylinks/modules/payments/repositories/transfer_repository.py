# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/repositories/transfer_repository.py

Acceso a datos de ObservedTransfer.

Autor: PyLinks
Fecha: 2026-10-05
"""

from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pylinks.shared.database.repository import BaseRepository
from pylinks.modules.payments.enums import TransferStatus
from pylinks.modules.payments.models import ObservedTransfer


class TransferRepository(BaseRepository[ObservedTransfer]):
    def __init__(self) -> None:
        super().__init__(ObservedTransfer)

    async def get_by_key(
        self,
        session: AsyncSession,
        tx_hash: str,
        log_index: int,
    ) -> Optional[ObservedTransfer]:
        stmt = select(ObservedTransfer).where(
            ObservedTransfer.tx_hash == tx_hash,
            ObservedTransfer.log_index == log_index,
        )
        result = await session.execute(stmt)
        return result.scalars().first()

    async def list_pending(
        self,
        session: AsyncSession,
        *,
        max_block: Optional[int] = None,
        min_block: Optional[int] = None,
    ) -> Sequence[ObservedTransfer]:
        stmt = select(ObservedTransfer).where(ObservedTransfer.status == TransferStatus.PENDING)
        if max_block is not None:
            stmt = stmt.where(ObservedTransfer.block_number <= max_block)
        if min_block is not None:
            stmt = stmt.where(ObservedTransfer.block_number >= min_block)
        stmt = stmt.order_by(ObservedTransfer.block_number.asc(), ObservedTransfer.log_index.asc())
        result = await session.execute(stmt)
        return result.scalars().all()

    async def lowest_orphaned_block(self, session: AsyncSession, *, min_block: int) -> Optional[int]:
        """Bloque más bajo entre las observaciones orphaned desde `min_block`."""
        stmt = select(func.min(ObservedTransfer.block_number)).where(
            ObservedTransfer.status == TransferStatus.ORPHANED,
            ObservedTransfer.block_number >= min_block,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()


__all__ = ["TransferRepository"]
