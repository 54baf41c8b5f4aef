# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/services/webhook_dispatcher.py

Despachador de webhooks: consume el outbox y entrega cada evento al
endpoint del comercio.

Cada entrega:
1) Reserva el evento en una transacción corta (lease: next_attempt_at se
   corre más allá del timeout para que otro worker no lo tome).
2) Hace el POST fuera de toda transacción y lock, con timeout acotado.
3) Registra el resultado en otra transacción corta:
   - 2xx → delivered
   - fallo con intentos restantes → pending con backoff
     min(base * 2^(intento-1), max), nunca decreciente
   - fallo en el último intento → permanently_failed (log de error)

Un evento cuyo pago cambió después se entrega igual: describe un hecho que
era cierto al momento de emitirse.

Autor: PyLinks
Fecha: 2026-10-06
"""

from __future__ import annotations

import logging
import time
from datetime import timedelta
from typing import Optional, Sequence

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pylinks.shared.config import PyLinksSettings
from pylinks.shared.database.database import session_scope
from pylinks.shared.utils.datetime_helpers import Clock, utcnow
from pylinks.modules.payments.enums import WebhookEventStatus
from pylinks.modules.payments.errors import (
    InvalidState,
    NotAuthorized,
    WebhookDeliveryFailed,
    WebhookEventNotFound,
    WebhookPermanentlyFailed,
)
from pylinks.modules.payments.metrics import observe_webhook_delivery
from pylinks.modules.payments.models import WebhookEvent
from pylinks.modules.payments.repositories import WebhookEventRepository
from pylinks.modules.payments.utils.signatures import (
    DELIVERY_HEADER,
    EVENT_HEADER,
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
)

logger = logging.getLogger(__name__)

# Margen sobre el timeout HTTP para el lease de un evento en vuelo
LEASE_MARGIN_SECONDS = 30
MAX_ERROR_LENGTH = 500


class WebhookDispatcher:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: PyLinksSettings,
        http_client: httpx.AsyncClient,
        *,
        clock: Clock = utcnow,
    ):
        self.session_factory = session_factory
        self.settings = settings
        self.http_client = http_client
        self.clock = clock
        self.event_repo = WebhookEventRepository()

    def backoff_delay(self, attempt: int) -> float:
        """
        Espera antes del siguiente intento tras el intento número `attempt` (1-based).

        Examples:
            base=1, max=300 → 1, 2, 4, 8, ... 300, 300
        """
        base = self.settings.webhook_backoff_base_seconds
        return min(base * 2 ** max(attempt - 1, 0), self.settings.webhook_backoff_max_seconds)

    # ------------------------------------------------------------------ #
    # Entrega
    # ------------------------------------------------------------------ #
    async def _claim(self, event_id: int, force: bool) -> Optional[WebhookEvent]:
        async with session_scope(self.session_factory) as session:
            event = await self.event_repo.get_for_update(session, event_id)
            if event is None:
                raise WebhookEventNotFound(event_id)
            if event.status is WebhookEventStatus.PERMANENTLY_FAILED:
                raise WebhookPermanentlyFailed(event.event_uid, event.attempts)
            if event.status is not WebhookEventStatus.PENDING:
                return None

            now = self.clock()
            if not force and event.next_attempt_at is not None and event.next_attempt_at > now:
                return None

            lease = self.settings.outbound_timeout_seconds + LEASE_MARGIN_SECONDS
            event.next_attempt_at = now + timedelta(seconds=lease)
            await session.commit()
            return event

    async def _post(self, event: WebhookEvent) -> int:
        headers = {
            "Content-Type": "application/json",
            SIGNATURE_HEADER: event.payload_signature,
            EVENT_HEADER: event.event_type.value,
            DELIVERY_HEADER: event.event_uid,
            TIMESTAMP_HEADER: str(int(self.clock().timestamp())),
        }
        try:
            response = await self.http_client.post(
                event.target_url,
                content=event.payload.encode("utf-8"),
                headers=headers,
                timeout=self.settings.outbound_timeout_seconds,
            )
        except httpx.TimeoutException as e:
            raise WebhookDeliveryFailed(event.event_uid, "timeout") from e
        except httpx.HTTPError as e:
            raise WebhookDeliveryFailed(event.event_uid, f"{type(e).__name__}: {e}") from e

        if not response.is_success:
            raise WebhookDeliveryFailed(event.event_uid, f"HTTP {response.status_code}")
        return response.status_code

    async def _record(
        self,
        event_id: int,
        *,
        status_code: Optional[int],
        error: Optional[str],
    ) -> WebhookEvent:
        async with session_scope(self.session_factory) as session:
            event = await self.event_repo.get_for_update(session, event_id)
            now = self.clock()
            event.attempts += 1
            event.last_status_code = status_code

            if error is None:
                event.status = WebhookEventStatus.DELIVERED
                event.delivered_at = now
                event.next_attempt_at = None
                event.last_error = None
            elif event.attempts >= self.settings.webhook_retry_count:
                event.status = WebhookEventStatus.PERMANENTLY_FAILED
                event.failed_at = now
                event.next_attempt_at = None
                event.last_error = error[:MAX_ERROR_LENGTH]
            else:
                event.next_attempt_at = now + timedelta(seconds=self.backoff_delay(event.attempts))
                event.last_error = error[:MAX_ERROR_LENGTH]
            await session.commit()
            return event

    async def deliver(self, event_id: int, *, force: bool = False) -> Optional[WebhookEvent]:
        """
        Intenta entregar un evento una vez.

        Returns:
            El evento actualizado, o None si no estaba disponible (ya entregado,
            en vuelo en otro worker o con backoff pendiente y sin `force`).

        Raises:
            WebhookEventNotFound: el evento no existe
            WebhookPermanentlyFailed: el evento agotó sus intentos
        """
        event = await self._claim(event_id, force)
        if event is None:
            return None

        started = time.perf_counter()
        status_code: Optional[int] = None
        error: Optional[str] = None
        try:
            status_code = await self._post(event)
        except WebhookDeliveryFailed as e:
            error = e.reason
        elapsed = time.perf_counter() - started

        event = await self._record(event_id, status_code=status_code, error=error)

        if event.status is WebhookEventStatus.DELIVERED:
            observe_webhook_delivery("delivered", elapsed)
            logger.info(
                f"[Webhook] {event.event_type.value} {event.event_uid} entregado a "
                f"{event.target_url} (intento {event.attempts})"
            )
        elif event.status is WebhookEventStatus.PERMANENTLY_FAILED:
            observe_webhook_delivery("permanently_failed", elapsed)
            logger.error(
                f"[Webhook] {event.event_type.value} {event.event_uid} falló definitivamente "
                f"tras {event.attempts} intentos: {error}"
            )
        else:
            observe_webhook_delivery("retry", elapsed)
            logger.warning(
                f"[Webhook] {event.event_type.value} {event.event_uid} falló "
                f"(intento {event.attempts}/{self.settings.webhook_retry_count}): {error}; "
                f"reintento en {event.next_attempt_at.isoformat()}"
            )
        return event

    async def dispatch_pending(self) -> int:
        """Entrega los eventos vencidos del outbox. Devuelve cuántos se entregaron."""
        async with session_scope(self.session_factory) as session:
            ids = await self.event_repo.list_due_ids(
                session, self.clock(), limit=self.settings.webhook_dispatch_batch_size
            )

        delivered = 0
        for event_id in ids:
            try:
                event = await self.deliver(event_id)
            except WebhookPermanentlyFailed:
                continue
            if event is not None and event.status is WebhookEventStatus.DELIVERED:
                delivered += 1
        return delivered

    # ------------------------------------------------------------------ #
    # Inspección y re-encolado manual
    # ------------------------------------------------------------------ #
    async def list_failed(self, merchant: Optional[str] = None, limit: int = 100) -> Sequence[WebhookEvent]:
        async with session_scope(self.session_factory) as session:
            return await self.event_repo.list_failed(session, merchant, limit)

    async def list_for_payment(self, payment_id: int) -> Sequence[WebhookEvent]:
        async with session_scope(self.session_factory) as session:
            return await self.event_repo.list_for_payment(session, payment_id)

    async def redeliver(self, event_id: int, merchant: str) -> WebhookEvent:
        """Re-encola un evento permanently_failed del comercio con intentos en cero."""
        async with session_scope(self.session_factory) as session:
            event = await self.event_repo.get_for_update(session, event_id)
            if event is None:
                raise WebhookEventNotFound(event_id)
            if event.merchant != merchant:
                raise NotAuthorized(f"El evento {event_id} no pertenece a este comercio")
            if event.status is not WebhookEventStatus.PERMANENTLY_FAILED:
                raise InvalidState(
                    f"Solo se re-encolan eventos fallidos (estado actual: '{event.status.value}')"
                )
            event.status = WebhookEventStatus.PENDING
            event.attempts = 0
            event.next_attempt_at = self.clock()
            event.failed_at = None
            await session.commit()

        logger.info(f"[Webhook] Evento {event.event_uid} re-encolado manualmente por {merchant}")
        return event


__all__ = ["WebhookDispatcher", "LEASE_MARGIN_SECONDS"]

# Fin del archivo pylinks/modules/payments/services/webhook_dispatcher.py
