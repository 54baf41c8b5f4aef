# -*- coding: utf-8 -*-
"""
tests/modules/payments/services/test_merchant_service.py

Registro de comercios, autenticación por API key y endpoint de webhook.
"""

import pytest

from pylinks.modules.payments.errors import Conflict, MerchantNotFound, NotAuthorized, ValidationFailed
from pylinks.modules.payments.utils.credentials import API_KEY_PREFIX, hash_api_key
from tests.fakes import MERCHANT, PARTNER, WEBHOOK_URL


class TestRegisterMerchant:
    @pytest.mark.asyncio
    async def test_register_returns_plain_key_once(self, container):
        merchant, api_key = await container.merchants.register_merchant(
            "Tienda Demo", "0x" + "A" * 40, webhook_url=WEBHOOK_URL, email="ventas@shop.example"
        )

        assert merchant.wallet_address == MERCHANT
        assert api_key.startswith(API_KEY_PREFIX)
        assert merchant.api_key_hash == hash_api_key(api_key)
        assert merchant.api_key_hash != api_key
        assert merchant.webhook_secret
        assert merchant.is_active is True

    @pytest.mark.asyncio
    async def test_without_webhook_there_is_no_secret(self, container):
        merchant, _ = await container.merchants.register_merchant("Sin Webhook", MERCHANT)
        assert merchant.webhook_url is None
        assert merchant.webhook_secret is None

    @pytest.mark.asyncio
    async def test_wallet_is_unique(self, container, merchant_account):
        with pytest.raises(Conflict):
            await container.merchants.register_merchant("Otra", MERCHANT)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "name, wallet, url",
        [
            ("", MERCHANT, None),
            ("Tienda", MERCHANT, "ftp://shop.example/hook"),
        ],
    )
    async def test_invalid_input(self, container, name, wallet, url):
        with pytest.raises(ValidationFailed):
            await container.merchants.register_merchant(name, wallet, webhook_url=url)


class TestAuthentication:
    @pytest.mark.asyncio
    async def test_authenticate_and_rotate(self, container, merchant_account):
        merchant, api_key = merchant_account
        assert (await container.merchants.authenticate(api_key)).id == merchant.id

        _, new_key = await container.merchants.rotate_api_key(merchant.id)
        assert new_key != api_key
        assert (await container.merchants.authenticate(new_key)).id == merchant.id
        with pytest.raises(NotAuthorized) as exc:
            await container.merchants.authenticate(api_key)
        assert exc.value.http_status == 401

    @pytest.mark.asyncio
    async def test_missing_key(self, container):
        with pytest.raises(NotAuthorized) as exc:
            await container.merchants.authenticate(None)
        assert exc.value.http_status == 401

    @pytest.mark.asyncio
    async def test_unknown_merchant(self, container):
        with pytest.raises(MerchantNotFound):
            await container.merchants.get_merchant(404)


class TestUpdateWebhook:
    @pytest.mark.asyncio
    async def test_new_url_rotates_secret(self, container, merchant_account):
        merchant, _ = merchant_account
        updated = await container.merchants.update_webhook(merchant.id, "https://shop.example/v2/hook")

        assert updated.webhook_url == "https://shop.example/v2/hook"
        assert updated.webhook_secret and updated.webhook_secret != merchant.webhook_secret

    @pytest.mark.asyncio
    async def test_remove_webhook(self, container, merchant_account):
        merchant, _ = merchant_account
        updated = await container.merchants.update_webhook(merchant.id, None)
        assert updated.webhook_url is None
        assert updated.webhook_secret is None

    @pytest.mark.asyncio
    async def test_other_merchants_unaffected(self, container, merchant_account):
        other, _ = await container.merchants.register_merchant("Socio", PARTNER, webhook_url=WEBHOOK_URL)
        merchant, _ = merchant_account
        await container.merchants.update_webhook(merchant.id, None)

        assert (await container.merchants.get_merchant(other.id)).webhook_url == WEBHOOK_URL
