# -*- coding: utf-8 -*-
"""
tests/modules/payments/utils/test_signatures.py

Tests de firma HMAC-SHA256 de webhooks y de credenciales generadas.
"""

import hashlib
import hmac

from pylinks.modules.payments.utils.credentials import (
    API_KEY_PREFIX,
    REFERRAL_ALPHABET,
    WEBHOOK_SECRET_PREFIX,
    generate_api_key,
    generate_referral_code,
    generate_webhook_secret,
    hash_api_key,
)
from pylinks.modules.payments.utils.signatures import sign_payload, verify_signature

BODY = b'{"id":"evt_1","type":"payment.paid"}'
SECRET = "whsec_test"


class TestWebhookSignature:
    def test_signature_is_hex_hmac_sha256(self):
        expected = hmac.new(SECRET.encode(), BODY, hashlib.sha256).hexdigest()
        assert sign_payload(BODY, SECRET) == expected

    def test_str_and_bytes_bodies_sign_the_same(self):
        assert sign_payload(BODY.decode(), SECRET) == sign_payload(BODY, SECRET)

    def test_verify_accepts_valid_signature(self):
        signature = sign_payload(BODY, SECRET)
        assert verify_signature(BODY, signature, SECRET)
        assert verify_signature(BODY, f"sha256={signature}", SECRET)

    def test_verify_rejects_tampered_body(self):
        signature = sign_payload(BODY, SECRET)
        assert not verify_signature(BODY + b" ", signature, SECRET)

    def test_verify_rejects_wrong_secret_or_empty_values(self):
        signature = sign_payload(BODY, SECRET)
        assert not verify_signature(BODY, signature, "otro")
        assert not verify_signature(BODY, "", SECRET)
        assert not verify_signature(BODY, signature, "")


class TestCredentials:
    def test_api_key_format_and_hash(self):
        key = generate_api_key()
        assert key.startswith(API_KEY_PREFIX)
        assert len(hash_api_key(key)) == 64
        assert hash_api_key(key) != hash_api_key(generate_api_key())

    def test_webhook_secret_prefix(self):
        assert generate_webhook_secret().startswith(WEBHOOK_SECRET_PREFIX)

    def test_referral_code_alphabet_and_length(self):
        code = generate_referral_code(10)
        assert len(code) == 10
        assert set(code) <= set(REFERRAL_ALPHABET)
