# -*- coding: utf-8 -*-
"""
tests/modules/payments/routes/test_escrow_routes.py

Endpoints /api/escrow: alta con oráculo, liberación, disputa, resolución
por el árbitro (X-Arbiter-Key) y liquidación.
"""

import pytest

from tests.fakes import CUSTOMER, MERCHANT, STRANGER, make_transfer

ARBITER_HEADERS = {"X-Arbiter-Key": "arbiter-secret"}


async def _funded(app, async_client, headers, session_id="esc-1") -> dict:
    response = await async_client.post(
        "/api/escrow",
        json={"customer": CUSTOMER, "usd_amount": "100.00", "session_id": session_id, "description": "Laptop"},
        headers=headers,
    )
    assert response.status_code == 201
    created = response.json()
    await app.state.container.ledger.apply_confirmed_transfer(
        make_transfer(session_id, created["amount_units"])
    )
    return created


class TestEscrowRoutes:
    @pytest.mark.asyncio
    async def test_create_shows_oracle_terms(self, async_client, merchant_headers):
        response = await async_client.post(
            "/api/escrow",
            json={"customer": CUSTOMER, "usd_amount": "100.00", "session_id": "esc-1"},
            headers=merchant_headers,
        )
        data = response.json()
        assert data["payment_type"] == "escrow"
        assert data["amount"] == "100.000000"
        assert data["escrow"]["usd_amount"] == "100.00000000"
        assert data["escrow"]["oracle_price"] == "1.00000000"
        assert data["escrow"]["auto_release"] is True
        assert data["escrow"]["disputed"] is False

    @pytest.mark.asyncio
    async def test_release_by_customer(self, app, async_client, merchant_headers):
        created = await _funded(app, async_client, merchant_headers)
        assert (await async_client.get(f"/api/escrow/{created['id']}")).json()["status"] == "escrowed"

        denied = await async_client.post(f"/api/escrow/{created['id']}/release", json={"caller": STRANGER})
        assert denied.status_code == 403

        released = await async_client.post(f"/api/escrow/{created['id']}/release", json={"caller": CUSTOMER})
        assert released.status_code == 200
        assert released.json()["status"] == "paid"

        settlement = await async_client.get(f"/api/escrow/{created['id']}/settlement")
        assert settlement.json()["recipient"] == MERCHANT
        assert settlement.json()["amount"] == "100.000000"

    @pytest.mark.asyncio
    async def test_dispute_and_arbiter_resolution(self, app, async_client, merchant_headers):
        created = await _funded(app, async_client, merchant_headers)

        disputed = await async_client.post(f"/api/escrow/{created['id']}/dispute", json={"caller": CUSTOMER})
        assert disputed.json()["status"] == "disputed"

        unresolved = await async_client.get(f"/api/escrow/{created['id']}/settlement")
        assert unresolved.status_code == 409
        assert unresolved.json()["code"] == "DISPUTE_UNRESOLVED"

        no_key = await async_client.post(f"/api/escrow/{created['id']}/resolve", json={"outcome": "refund"})
        assert no_key.status_code == 401
        wrong_key = await async_client.post(
            f"/api/escrow/{created['id']}/resolve",
            json={"outcome": "refund"},
            headers={"X-Arbiter-Key": "nope"},
        )
        assert wrong_key.status_code == 401

        resolved = await async_client.post(
            f"/api/escrow/{created['id']}/resolve",
            json={"outcome": "refund", "arbiter": "soporte"},
            headers=ARBITER_HEADERS,
        )
        assert resolved.status_code == 200
        assert resolved.json()["status"] == "refunded"
        assert resolved.json()["escrow"]["resolved_by"] == "soporte"

        settlement = await async_client.get(f"/api/escrow/{created['id']}/settlement")
        assert settlement.json()["recipient"] == CUSTOMER
        assert settlement.json()["resolution"] == "refund"

    @pytest.mark.asyncio
    async def test_merchant_refund(self, app, async_client, merchant_headers):
        created = await _funded(app, async_client, merchant_headers)
        refunded = await async_client.post(f"/api/escrow/{created['id']}/refund", headers=merchant_headers)
        assert refunded.json()["status"] == "refunded"

    @pytest.mark.asyncio
    async def test_regular_payment_is_not_found_as_escrow(self, async_client, merchant_headers):
        created = await async_client.post(
            "/api/payments", json={"amount": "1.00", "session_id": "order-1"}, headers=merchant_headers
        )
        response = await async_client.get(f"/api/escrow/{created.json()['id']}")
        assert response.status_code == 404
