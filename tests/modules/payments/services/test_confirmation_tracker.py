# -*- coding: utf-8 -*-
"""
tests/modules/payments/services/test_confirmation_tracker.py

Tests del rastreador de confirmaciones: umbral de N bloques, idempotencia
por (tx_hash, log_index), reorgs y caída del nodo RPC.
"""

import pytest
from sqlalchemy import select

from pylinks.modules.payments.enums import PaymentStatus, TransferOutcome, TransferStatus
from pylinks.modules.payments.models import ObservedTransfer
from tests.fakes import MERCHANT, make_transfer


async def _observations(session_factory):
    async with session_factory() as session:
        result = await session.execute(select(ObservedTransfer).order_by(ObservedTransfer.id))
        return list(result.scalars().all())


class TestConfirmationThreshold:
    @pytest.mark.asyncio
    async def test_applies_only_after_n_confirmations(self, container, transfer_source):
        """Con N=2, un log del bloque 100 se aplica cuando la cabeza llega a 102."""
        payment = await container.ledger.create_payment(MERCHANT, "25.00", "order-1")
        transfer_source.transfers = [make_transfer("order-1", payment.amount, recipient=payment.pay_to)]

        transfer_source.head = 101
        assert await container.tracker.poll() == {}
        assert (await container.ledger.get_payment(payment.id)).status is PaymentStatus.CREATED

        transfer_source.head = 102
        assert await container.tracker.poll() == {TransferOutcome.APPLIED: 1}
        paid = await container.ledger.get_payment(payment.id)
        assert paid.status is PaymentStatus.PAID
        assert paid.block_number == 100

    @pytest.mark.asyncio
    async def test_repoll_never_credits_twice(self, container, transfer_source, session_factory):
        payment = await container.ledger.create_payment(MERCHANT, "25.00", "order-1")
        transfer_source.transfers = [make_transfer("order-1", payment.amount, recipient=payment.pay_to)]
        transfer_source.head = 110

        await container.tracker.poll()
        await container.tracker.poll()
        container.tracker.last_scanned_block = None
        await container.tracker.poll()

        rows = await _observations(session_factory)
        assert len(rows) == 1
        assert rows[0].status is TransferStatus.APPLIED
        assert rows[0].payment_id == payment.id
        paid = await container.ledger.get_payment(payment.id)
        assert sum(c.amount for c in paid.credits) == payment.amount

    @pytest.mark.asyncio
    async def test_ingest_is_idempotent(self, container):
        transfer = make_transfer("order-1", 1_000_000)
        assert await container.tracker.ingest([transfer, transfer]) == 1
        assert await container.tracker.ingest([transfer]) == 0

    @pytest.mark.asyncio
    async def test_unmatched_transfer_is_rejected(self, container, transfer_source, session_factory):
        transfer_source.transfers = [make_transfer("desconocida", 5_000_000)]
        transfer_source.head = 105

        assert await container.tracker.poll() == {TransferOutcome.NO_MATCH: 1}
        rows = await _observations(session_factory)
        assert rows[0].status is TransferStatus.REJECTED
        assert rows[0].outcome == TransferOutcome.NO_MATCH.value


class TestReorgs:
    @pytest.mark.asyncio
    async def test_vanished_transfer_is_orphaned(self, container, transfer_source, session_factory):
        payment = await container.ledger.create_payment(MERCHANT, "25.00", "order-1")
        transfer_source.transfers = [make_transfer("order-1", payment.amount, recipient=payment.pay_to)]
        transfer_source.head = 101
        await container.tracker.poll()

        transfer_source.transfers = []
        transfer_source.head = 103
        assert await container.tracker.poll() == {}

        rows = await _observations(session_factory)
        assert rows[0].status is TransferStatus.ORPHANED
        assert (await container.ledger.get_payment(payment.id)).status is PaymentStatus.CREATED

    @pytest.mark.asyncio
    async def test_reincluded_transfer_waits_for_new_block(self, container, transfer_source, session_factory):
        payment = await container.ledger.create_payment(MERCHANT, "25.00", "order-1")
        transfer_source.transfers = [make_transfer("order-1", payment.amount, recipient=payment.pay_to)]
        transfer_source.head = 101
        await container.tracker.poll()

        transfer_source.transfers = [
            make_transfer("order-1", payment.amount, recipient=payment.pay_to, block_number=101)
        ]
        transfer_source.head = 102
        assert await container.tracker.poll() == {}
        assert (await _observations(session_factory))[0].block_number == 101

        transfer_source.head = 103
        assert await container.tracker.poll() == {TransferOutcome.APPLIED: 1}

    @pytest.mark.asyncio
    async def test_orphaned_transfer_that_reappears_is_credited(
        self, container, transfer_source, session_factory
    ):
        """Un nodo rezagado omite el log un poll; al reaparecer se acredita igual."""
        payment = await container.ledger.create_payment(MERCHANT, "25.00", "order-1")
        transfer = make_transfer("order-1", payment.amount, recipient=payment.pay_to, block_number=100)
        transfer_source.transfers = [transfer]
        transfer_source.head = 101
        await container.tracker.poll()

        transfer_source.transfers = []
        transfer_source.head = 102
        await container.tracker.poll()
        assert (await _observations(session_factory))[0].status is TransferStatus.ORPHANED

        transfer_source.transfers = [transfer]
        transfer_source.head = 103
        assert await container.tracker.poll() == {TransferOutcome.APPLIED: 1}

        [row] = await _observations(session_factory)
        assert row.status is TransferStatus.APPLIED
        assert (await container.ledger.get_payment(payment.id)).status is PaymentStatus.PAID

    @pytest.mark.asyncio
    async def test_reappearing_in_new_block_waits_for_confirmations(
        self, container, transfer_source, session_factory
    ):
        payment = await container.ledger.create_payment(MERCHANT, "25.00", "order-1")
        transfer_source.transfers = [make_transfer("order-1", payment.amount, recipient=payment.pay_to)]
        transfer_source.head = 101
        await container.tracker.poll()

        transfer_source.transfers = []
        transfer_source.head = 102
        await container.tracker.poll()

        transfer_source.transfers = [
            make_transfer("order-1", payment.amount, recipient=payment.pay_to, block_number=102)
        ]
        transfer_source.head = 103
        assert await container.tracker.poll() == {}
        [row] = await _observations(session_factory)
        assert row.status is TransferStatus.PENDING
        assert row.block_number == 102
        assert row.outcome is None

        transfer_source.head = 104
        assert await container.tracker.poll() == {TransferOutcome.APPLIED: 1}


class TestRpcFailure:
    @pytest.mark.asyncio
    async def test_rpc_down_skips_poll(self, container, transfer_source, session_factory):
        transfer_source.transfers = [make_transfer("order-1", 1_000_000)]
        transfer_source.head = 200
        transfer_source.fail = True

        assert await container.tracker.poll() == {}
        assert await _observations(session_factory) == []
        assert container.tracker.last_scanned_block is None
