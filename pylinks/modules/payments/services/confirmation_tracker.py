# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/services/confirmation_tracker.py

Rastreador de confirmaciones on-chain.

Ciclo de cada poll:
1) Lee la cabeza de la cadena y las transferencias del token en la ventana
   [desde, cabeza], donde `desde` cubre también las observaciones aún no
   confirmadas (se re-escanean en cada poll).
2) Registra cada (tx_hash, log_index) una sola vez (clave única en BD):
   reiniciar el proceso o re-observar un log nunca duplica créditos.
3) Las observaciones pendientes que ya no aparecen en la ventana se marcan
   `orphaned` y no se aplican. Si el log reaparece (reorg corto o nodo RPC
   rezagado) vuelve a `pending` con su nuevo bloque y espera otra vez las
   N confirmaciones.
4) Aplica al ledger las que cumplen head - block_number >= N confirmaciones.

Ninguna llamada RPC ocurre dentro de una transacción de BD.

Autor: PyLinks
Fecha: 2026-10-06
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pylinks.shared.config import PyLinksSettings
from pylinks.shared.database.database import session_scope
from pylinks.shared.utils.datetime_helpers import Clock, utcnow
from pylinks.modules.payments.adapters.chain_source import (
    ChainSourceError,
    ChainTransfer,
    TransferSource,
)
from pylinks.modules.payments.enums import TransferOutcome, TransferStatus
from pylinks.modules.payments.models import ObservedTransfer
from pylinks.modules.payments.repositories import TransferRepository
from pylinks.modules.payments.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)


def _as_chain_transfer(row: ObservedTransfer) -> ChainTransfer:
    return ChainTransfer(
        tx_hash=row.tx_hash,
        log_index=row.log_index,
        sender=row.sender,
        recipient=row.recipient,
        amount=row.amount,
        block_number=row.block_number,
        reference=row.reference,
    )


class ConfirmationTracker:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: PyLinksSettings,
        ledger: LedgerService,
        source: TransferSource,
        *,
        clock: Clock = utcnow,
    ):
        self.session_factory = session_factory
        self.settings = settings
        self.ledger = ledger
        self.source = source
        self.clock = clock
        self.transfer_repo = TransferRepository()
        self.last_scanned_block: Optional[int] = None
        self._poll_lock = asyncio.Lock()

    @property
    def confirmations(self) -> int:
        return self.settings.block_confirmation_count

    async def ingest(self, transfers: Iterable[ChainTransfer]) -> int:
        """
        Registra transferencias observadas. Devuelve cuántas son nuevas.

        Una observación pendiente vista de nuevo en otro bloque (reorg que la
        re-incluyó) actualiza su block_number. Una orphaned que reaparece
        vuelve a pending. Las ya aplicadas o rechazadas no cambian.
        """
        now = self.clock()
        created = 0
        batch_keys: set[tuple[str, int]] = set()
        async with session_scope(self.session_factory) as session:
            for transfer in transfers:
                if transfer.key in batch_keys:
                    continue
                batch_keys.add(transfer.key)
                existing = await self.transfer_repo.get_by_key(session, transfer.tx_hash, transfer.log_index)
                if existing is not None:
                    if existing.status is TransferStatus.ORPHANED:
                        logger.warning(
                            f"[Tracker] {transfer.tx_hash}:{transfer.log_index} reapareció en bloque "
                            f"{transfer.block_number}; vuelve a esperar confirmaciones"
                        )
                        existing.status = TransferStatus.PENDING
                        existing.block_number = transfer.block_number
                        existing.outcome = None
                        existing.processed_at = None
                    elif existing.status is TransferStatus.PENDING and existing.block_number != transfer.block_number:
                        logger.warning(
                            f"[Tracker] {transfer.tx_hash}:{transfer.log_index} re-incluida en bloque "
                            f"{transfer.block_number} (antes {existing.block_number})"
                        )
                        existing.block_number = transfer.block_number
                    continue

                session.add(
                    ObservedTransfer(
                        tx_hash=transfer.tx_hash,
                        log_index=transfer.log_index,
                        sender=transfer.sender.lower(),
                        recipient=transfer.recipient.lower(),
                        amount=transfer.amount,
                        reference=transfer.reference,
                        block_number=transfer.block_number,
                        status=TransferStatus.PENDING,
                        observed_at=now,
                    )
                )
                created += 1
            try:
                await session.commit()
            except IntegrityError as e:
                # otro proceso registró la misma observación
                await session.rollback()
                logger.info(f"[Tracker] Observaciones ya registradas por otro proceso: {e.orig!r}")
                return 0

        if created:
            logger.info(f"[Tracker] {created} transferencias nuevas observadas")
        return created

    async def process_confirmations(self, head: int) -> dict[TransferOutcome, int]:
        """Aplica al ledger las observaciones pendientes con N confirmaciones."""
        async with session_scope(self.session_factory) as session:
            rows = list(
                await self.transfer_repo.list_pending(session, max_block=head - self.confirmations)
            )

        results: dict[TransferOutcome, int] = {}
        for row in rows:
            outcome = await self.ledger.apply_confirmed_transfer(
                _as_chain_transfer(row),
                observation_id=row.id,
            )
            results[outcome] = results.get(outcome, 0) + 1
        return results

    async def _orphan_missing(self, seen: set[tuple[str, int]], from_block: int, head: int) -> int:
        orphaned = 0
        async with session_scope(self.session_factory) as session:
            pending = await self.transfer_repo.list_pending(session, min_block=from_block, max_block=head)
            for row in pending:
                if (row.tx_hash, row.log_index) in seen:
                    continue
                row.status = TransferStatus.ORPHANED
                row.outcome = TransferStatus.ORPHANED.value
                row.processed_at = self.clock()
                orphaned += 1
                logger.warning(
                    f"[Tracker] {row.tx_hash}:{row.log_index} (bloque {row.block_number}) "
                    "desapareció antes de confirmarse; marcada como orphaned"
                )
            await session.commit()
        return orphaned

    async def _scan_start(self, head: int) -> int:
        """
        Primer bloque a escanear: lo siguiente al último escaneo, retrocediendo
        hasta la observación pendiente más antigua y hasta las orphaned que
        siguen dentro de la ventana (un nodo rezagado puede devolverlas luego).
        """
        window_start = max(head - self.settings.transfer_scan_window_blocks, 0)
        async with session_scope(self.session_factory) as session:
            pending = await self.transfer_repo.list_pending(session)
            lowest_orphaned = await self.transfer_repo.lowest_orphaned_block(session, min_block=window_start)
        lowest_pending = min((row.block_number for row in pending), default=None)

        if self.last_scanned_block is not None:
            start = self.last_scanned_block + 1
        else:
            start = window_start
        for block in (lowest_pending, lowest_orphaned):
            if block is not None:
                start = min(start, block)
        return max(start, 0)

    async def poll(self) -> dict[TransferOutcome, int]:
        """Un ciclo completo: escanear, registrar, descartar huérfanas y aplicar."""
        async with self._poll_lock:
            try:
                head = await self.source.get_block_number()
                from_block = await self._scan_start(head)
                transfers = await self.source.get_transfers(from_block, head) if from_block <= head else []
            except ChainSourceError as e:
                logger.warning(f"[Tracker] Poll omitido, nodo RPC no disponible: {e}")
                return {}

            await self.ingest(transfers)
            await self._orphan_missing({t.key for t in transfers}, from_block, head)
            results = await self.process_confirmations(head)
            self.last_scanned_block = head

        if results:
            summary = ", ".join(f"{k.value}={v}" for k, v in results.items())
            logger.info(f"[Tracker] Poll hasta bloque {head}: {summary}")
        return results


__all__ = ["ConfirmationTracker"]

# Fin del archivo pylinks/modules/payments/services/confirmation_tracker.py
