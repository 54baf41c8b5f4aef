# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/utils/credentials.py

Generación de API keys, secretos de webhook y códigos de referido.

- API key:          "pk_" + 64 hex (solo se persiste su sha256)
- Secreto webhook:  "whsec_" + 48 hex
- Código referido:  mayúsculas + dígitos, longitud configurable

Autor: PyLinks
Fecha: 2026-10-04
"""

import hashlib
import secrets
import string

API_KEY_PREFIX = "pk_"
WEBHOOK_SECRET_PREFIX = "whsec_"
REFERRAL_ALPHABET = string.ascii_uppercase + string.digits


def generate_api_key() -> str:
    return API_KEY_PREFIX + secrets.token_hex(32)


def hash_api_key(api_key: str) -> str:
    return hashlib.sha256(api_key.encode("utf-8")).hexdigest()


def generate_webhook_secret() -> str:
    return WEBHOOK_SECRET_PREFIX + secrets.token_hex(24)


def generate_referral_code(length: int = 8) -> str:
    return "".join(secrets.choice(REFERRAL_ALPHABET) for _ in range(length))


__all__ = [
    "API_KEY_PREFIX",
    "WEBHOOK_SECRET_PREFIX",
    "REFERRAL_ALPHABET",
    "generate_api_key",
    "hash_api_key",
    "generate_webhook_secret",
    "generate_referral_code",
]
