# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/middleware/rate_limiter.py

Rate limiter de la API de pagos.

Ventana deslizante en memoria (RATE_LIMIT_WINDOW_MS / RATE_LIMIT_MAX_REQUESTS).
Cada comercio autenticado tiene su propia ventana; cualquier otra request
(sin API key o con una que no autentica) cuenta contra la IP del cliente.
X-Forwarded-For solo se usa con RATE_LIMIT_TRUST_PROXY=true.

Autor: PyLinks
Fecha: 2026-10-07
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, List, Tuple

from fastapi import Request

from pylinks.modules.payments.errors import NotAuthorized, RateLimited

logger = logging.getLogger(__name__)


class SlidingWindowRateLimiter:
    """Rate limiter con ventana deslizante en memoria."""

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        *,
        enabled: bool = True,
        timer: Callable[[], float] = time.monotonic,
        max_keys: int = 10_000,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.enabled = enabled
        self.timer = timer
        self.max_keys = max_keys
        # clave -> timestamps dentro de la ventana; sin entradas vacías
        self._requests: Dict[str, List[float]] = {}

    def _recent(self, key: str, current_time: float) -> List[float]:
        """Timestamps vigentes de la clave; descarta la clave si no le queda ninguno."""
        cutoff = current_time - self.window_seconds
        recent = [ts for ts in self._requests.get(key, ()) if ts > cutoff]
        if recent:
            self._requests[key] = recent
        else:
            self._requests.pop(key, None)
        return recent

    def is_allowed(self, key: str) -> Tuple[bool, int]:
        """
        Verifica si una clave puede hacer una request.

        Returns:
            Tuple[is_allowed, remaining_requests]
        """
        current_time = self.timer()
        if len(self._requests) >= self.max_keys:
            self.prune()
        recent = self._recent(key, current_time)
        if len(recent) >= self.max_requests:
            return False, 0

        recent.append(current_time)
        self._requests[key] = recent
        return True, self.max_requests - len(recent)

    def get_retry_after(self, key: str) -> int:
        """Segundos hasta que la clave pueda volver a hacer requests."""
        current_time = self.timer()
        recent = self._recent(key, current_time)
        if not recent:
            return 0
        return max(1, int(min(recent) + self.window_seconds - current_time) + 1)

    def prune(self) -> int:
        """Descarta las claves sin requests en la ventana. Devuelve cuántas quedan."""
        current_time = self.timer()
        for key in list(self._requests):
            self._recent(key, current_time)
        return len(self._requests)

    def reset(self) -> None:
        """Limpia todos los registros (útil para tests)."""
        self._requests.clear()

    def __len__(self) -> int:
        return len(self._requests)


def _client_ip(request: Request, trust_proxy: bool) -> str:
    if trust_proxy:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


async def _get_client_key(request: Request) -> str:
    container = request.app.state.container
    api_key = request.headers.get("x-api-key")
    if api_key:
        try:
            merchant = await container.merchants.authenticate(api_key)
        except NotAuthorized:
            pass
        else:
            return f"merchant:{merchant.id}"
    return f"ip:{_client_ip(request, container.settings.rate_limit_trust_proxy)}"


async def check_rate_limit(request: Request) -> None:
    """
    Dependencia FastAPI: aplica el límite del contenedor de la app.

    Raises:
        RateLimited (429) si se excede el límite.
    """
    limiter: SlidingWindowRateLimiter = request.app.state.container.rate_limiter
    if not limiter.enabled:
        return

    key = await _get_client_key(request)
    allowed, _ = limiter.is_allowed(key)
    if not allowed:
        retry_after = limiter.get_retry_after(key)
        logger.warning(f"[RateLimit] Límite excedido para {key}; reintentar en {retry_after}s")
        raise RateLimited(retry_after)


__all__ = ["SlidingWindowRateLimiter", "check_rate_limit"]

# Fin del archivo pylinks/modules/payments/middleware/rate_limiter.py
