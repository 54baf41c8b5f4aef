# -*- coding: utf-8 -*-
"""
tests/shared/config/test_settings.py

Carga de PyLinksSettings desde entorno: overrides, vacíos como None,
derivados y validación de rangos.
"""

import pytest
from pydantic import ValidationError

from pylinks.shared.config import PyLinksSettings, get_settings, reset_settings


class TestPyLinksSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("BLOCK_CONFIRMATION_COUNT", raising=False)
        settings = PyLinksSettings(_env_file=None)
        assert settings.block_confirmation_count == 2
        assert settings.token_decimals == 6
        assert settings.usd_decimals == 8
        assert settings.escrow_hold_days == 7
        assert settings.webhook_retry_count == 3

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("BLOCK_CONFIRMATION_COUNT", "12")
        monkeypatch.setenv("platform_fee_bps", "50")
        monkeypatch.setenv("WEBHOOK_TIMEOUT_MS", "2500")
        monkeypatch.setenv("RATE_LIMIT_WINDOW_MS", "30000")

        settings = PyLinksSettings(_env_file=None)
        assert settings.block_confirmation_count == 12
        assert settings.platform_fee_bps == 50
        assert settings.outbound_timeout_seconds == 2.5
        assert settings.rate_limit_window_seconds == 30.0

    def test_blank_values_are_unset(self, monkeypatch):
        monkeypatch.setenv("ETH_RPC_URL", "  ")
        monkeypatch.setenv("ARBITER_API_KEY", "")
        monkeypatch.setenv("PRICE_ORACLE_FIXED_PRICE", "")

        settings = PyLinksSettings(_env_file=None)
        assert settings.eth_rpc_url is None
        assert settings.arbiter_api_key is None
        assert settings.price_oracle_fixed_price is None

    def test_cors_origins(self):
        settings = PyLinksSettings(_env_file=None, allowed_origins="https://a.example, ,https://b.example")
        assert settings.cors_origins == ["https://a.example", "https://b.example"]

    @pytest.mark.parametrize(
        "field, value",
        [("port", 0), ("platform_fee_bps", 10_001), ("referral_code_length", 2)],
    )
    def test_out_of_range(self, field, value):
        with pytest.raises(ValidationError):
            PyLinksSettings(_env_file=None, **{field: value})


class TestGetSettings:
    def test_cached_until_reset(self, monkeypatch):
        reset_settings()
        monkeypatch.setenv("APP_NAME", "PyLinks Test")
        first = get_settings()
        assert get_settings() is first
        assert first.app_name == "PyLinks Test"

        reset_settings()
        assert get_settings() is not first
        reset_settings()
