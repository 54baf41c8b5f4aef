# -*- coding: utf-8 -*-
"""
tests/modules/payments/schemas/test_webhook_payload.py

El payload de webhook es cerrado: la forma de `data` depende del tipo de evento.
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from pylinks.modules.payments.enums import PaymentStatus, PaymentType, WebhookEventType
from pylinks.modules.payments.schemas import EscrowEventData, PaymentEventData, WebhookPayload

NOW = datetime(2026, 10, 1, tzinfo=timezone.utc)


def _payment_data(**overrides):
    data = dict(
        payment_id=1,
        session_id="order-1",
        merchant="0xm",
        amount="25.000000",
        payment_type=PaymentType.REGULAR,
        status=PaymentStatus.PAID,
    )
    data.update(overrides)
    return data


def test_payment_event_accepts_payment_data():
    payload = WebhookPayload(
        id="evt_1",
        type=WebhookEventType.PAYMENT_PAID,
        created_at=NOW,
        data=PaymentEventData(**_payment_data()),
    )
    assert payload.data.amount == "25.000000"


def test_escrow_event_requires_escrow_data():
    with pytest.raises(ValidationError):
        WebhookPayload(
            id="evt_1",
            type=WebhookEventType.ESCROW_FUNDED,
            created_at=NOW,
            data=PaymentEventData(**_payment_data(payment_type=PaymentType.ESCROW)),
        )


def test_payment_event_rejects_escrow_data():
    data = EscrowEventData(
        **_payment_data(payment_type=PaymentType.ESCROW, status=PaymentStatus.ESCROWED),
        usd_amount="100.00000000",
        oracle_price="1.00000000",
        hold_until=NOW,
        auto_release=True,
        disputed=False,
    )
    with pytest.raises(ValidationError):
        WebhookPayload(id="evt_1", type=WebhookEventType.PAYMENT_PAID, created_at=NOW, data=data)


def test_unknown_fields_are_rejected():
    with pytest.raises(ValidationError):
        PaymentEventData(**_payment_data(), internal_note="no")
