# -*- coding: utf-8 -*-
"""
tests/modules/payments/services/test_subscription_service.py

Suscripciones: alta, facturación periódica, límite de cobros,
cancelación y oráculo caído.
"""

from datetime import timedelta

import pytest

from pylinks.modules.payments.enums import PaymentStatus, PaymentType, SubscriptionStatus
from pylinks.modules.payments.errors import (
    InvalidAmount,
    InvalidState,
    NotAuthorized,
    PriceUnavailable,
    SubscriptionNotFound,
    ValidationFailed,
)
from pylinks.modules.payments.services import SubscriptionService
from pylinks.modules.payments.services.subscription_service import subscription_session_id
from tests.fakes import CUSTOMER, MERCHANT, STRANGER


class _DownOracle:
    async def get_price(self) -> int:
        raise PriceUnavailable()


async def _subscription_payments(container):
    return await container.ledger.list_payments(MERCHANT, payment_type=PaymentType.SUBSCRIPTION)


class TestCreateSubscription:
    @pytest.mark.asyncio
    async def test_create_is_due_immediately(self, container, clock):
        subscription = await container.subscriptions.create_subscription(
            MERCHANT, CUSTOMER, "9.99", interval_days=30, description="Plan Pro"
        )

        assert subscription.status is SubscriptionStatus.ACTIVE
        assert subscription.usd_amount == 999_000_000
        assert subscription.interval_seconds == 30 * 86_400
        assert subscription.next_payment_at == clock.now
        assert subscription.payment_count == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "usd, days, max_payments, error",
        [
            ("0", 30, 0, InvalidAmount),
            ("abc", 30, 0, InvalidAmount),
            ("9.99", 0, 0, ValidationFailed),
            ("9.99", 30, -1, ValidationFailed),
        ],
    )
    async def test_invalid_terms(self, container, usd, days, max_payments, error):
        with pytest.raises(error):
            await container.subscriptions.create_subscription(
                MERCHANT, CUSTOMER, usd, interval_days=days, max_payments=max_payments
            )

    @pytest.mark.asyncio
    async def test_unknown_subscription(self, container):
        with pytest.raises(SubscriptionNotFound):
            await container.subscriptions.get_subscription(404)


class TestBilling:
    @pytest.mark.asyncio
    async def test_bills_once_per_interval(self, container, clock):
        subscription = await container.subscriptions.create_subscription(
            MERCHANT, CUSTOMER, "9.99", interval_days=30
        )

        assert await container.subscriptions.bill_due_subscriptions() == 1
        assert await container.subscriptions.bill_due_subscriptions() == 0

        [payment] = await _subscription_payments(container)
        assert payment.session_id == subscription_session_id(subscription.id, 1)
        assert payment.amount == 9_990_000
        assert payment.customer == CUSTOMER
        assert payment.subscription_id == subscription.id
        assert payment.status is PaymentStatus.CREATED

        clock.advance(days=30)
        assert await container.subscriptions.bill_due_subscriptions() == 1
        sessions = sorted(p.session_id for p in await _subscription_payments(container))
        assert sessions == [f"sub_{subscription.id}_1", f"sub_{subscription.id}_2"]

    @pytest.mark.asyncio
    async def test_no_catch_up_after_long_pause(self, container, clock):
        """Tras meses sin barrido se emite un solo cargo y el calendario se reinicia."""
        subscription = await container.subscriptions.create_subscription(
            MERCHANT, CUSTOMER, "5.00", interval_days=7
        )
        await container.subscriptions.bill_due_subscriptions()

        clock.advance(days=90)
        assert await container.subscriptions.bill_due_subscriptions() == 1
        assert await container.subscriptions.bill_due_subscriptions() == 0

        updated = await container.subscriptions.get_subscription(subscription.id)
        assert updated.payment_count == 2
        assert updated.next_payment_at == clock.now + timedelta(days=7)

    @pytest.mark.asyncio
    async def test_completes_after_max_payments(self, container, clock):
        subscription = await container.subscriptions.create_subscription(
            MERCHANT, CUSTOMER, "9.99", interval_days=30, max_payments=2
        )
        await container.subscriptions.bill_due_subscriptions()
        clock.advance(days=30)
        await container.subscriptions.bill_due_subscriptions()

        done = await container.subscriptions.get_subscription(subscription.id)
        assert done.status is SubscriptionStatus.COMPLETED
        assert done.completed_at == clock.now

        clock.advance(days=30)
        assert await container.subscriptions.bill_due_subscriptions() == 0
        assert len(await _subscription_payments(container)) == 2

    @pytest.mark.asyncio
    async def test_without_auto_renew_bills_once(self, container):
        subscription = await container.subscriptions.create_subscription(
            MERCHANT, CUSTOMER, "9.99", interval_days=30, auto_renew=False
        )
        await container.subscriptions.bill_due_subscriptions()
        assert (await container.subscriptions.get_subscription(subscription.id)).status is SubscriptionStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_oracle_down_postpones_billing(self, container, settings, clock):
        await container.subscriptions.create_subscription(MERCHANT, CUSTOMER, "9.99", interval_days=30)
        subscriptions = SubscriptionService(
            container.session_factory, settings, container.ledger, _DownOracle(), clock=clock
        )

        assert await subscriptions.bill_due_subscriptions() == 0
        assert await _subscription_payments(container) == []
        assert await container.subscriptions.bill_due_subscriptions() == 1

    @pytest.mark.asyncio
    async def test_rejected_charge_is_skipped_and_schedule_advances(self, container, clock):
        """Un sessionId ocupado por otro pago no deja la suscripción atascada."""
        subscription = await container.subscriptions.create_subscription(
            MERCHANT, CUSTOMER, "9.99", interval_days=30
        )
        await container.ledger.create_payment(
            MERCHANT, "1.00", subscription_session_id(subscription.id, 1)
        )

        assert await container.subscriptions.bill_due_subscriptions() == 0
        skipped = await container.subscriptions.get_subscription(subscription.id)
        assert skipped.status is SubscriptionStatus.ACTIVE
        assert skipped.payment_count == 1
        assert skipped.next_payment_at == clock.now + timedelta(days=30)
        assert await container.subscriptions.bill_due_subscriptions() == 0

        clock.advance(days=30)
        assert await container.subscriptions.bill_due_subscriptions() == 1
        [payment] = await _subscription_payments(container)
        assert payment.session_id == subscription_session_id(subscription.id, 2)


class TestCancelSubscription:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("caller", [MERCHANT, CUSTOMER])
    async def test_parties_can_cancel(self, container, clock, caller):
        subscription = await container.subscriptions.create_subscription(
            MERCHANT, CUSTOMER, "9.99", interval_days=30
        )
        cancelled = await container.subscriptions.cancel_subscription(subscription.id, caller)

        assert cancelled.status is SubscriptionStatus.CANCELLED
        assert cancelled.cancelled_at == clock.now
        assert await container.subscriptions.bill_due_subscriptions() == 0

    @pytest.mark.asyncio
    async def test_stranger_and_repeat_cancel(self, container):
        subscription = await container.subscriptions.create_subscription(
            MERCHANT, CUSTOMER, "9.99", interval_days=30
        )
        with pytest.raises(NotAuthorized):
            await container.subscriptions.cancel_subscription(subscription.id, STRANGER)

        await container.subscriptions.cancel_subscription(subscription.id, MERCHANT)
        with pytest.raises(InvalidState):
            await container.subscriptions.cancel_subscription(subscription.id, MERCHANT)
