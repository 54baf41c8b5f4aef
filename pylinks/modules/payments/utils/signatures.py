# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/utils/signatures.py

Firma HMAC-SHA256 de webhooks salientes.

El comercio verifica con su secreto:
    verify_signature(raw_body, request.headers["X-PyLinks-Signature"], secret)

Autor: PyLinks
Fecha: 2026-10-04
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Union

SIGNATURE_HEADER = "X-PyLinks-Signature"
EVENT_HEADER = "X-PyLinks-Event"
DELIVERY_HEADER = "X-PyLinks-Delivery"
TIMESTAMP_HEADER = "X-PyLinks-Timestamp"


def _as_bytes(value: Union[str, bytes]) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else value


def sign_payload(body: Union[str, bytes], secret: str) -> str:
    """HMAC-SHA256 en hexadecimal sobre el cuerpo crudo."""
    return hmac.new(_as_bytes(secret), _as_bytes(body), hashlib.sha256).hexdigest()


def verify_signature(body: Union[str, bytes], signature: str, secret: str) -> bool:
    """Comparación en tiempo constante; acepta el prefijo opcional 'sha256='."""
    if not signature or not secret:
        return False
    if signature.startswith("sha256="):
        signature = signature[len("sha256="):]
    expected = sign_payload(body, secret)
    return hmac.compare_digest(expected, signature.strip().lower())


__all__ = [
    "SIGNATURE_HEADER",
    "EVENT_HEADER",
    "DELIVERY_HEADER",
    "TIMESTAMP_HEADER",
    "sign_payload",
    "verify_signature",
]

# Fin del archivo pylinks/modules/payments/utils/signatures.py
