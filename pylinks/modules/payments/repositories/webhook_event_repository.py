# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/repositories/webhook_event_repository.py

Acceso a datos del outbox de webhooks.

Autor: PyLinks
Fecha: 2026-10-05
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from pylinks.shared.database.repository import BaseRepository
from pylinks.modules.payments.enums import WebhookEventStatus
from pylinks.modules.payments.models import WebhookEvent


class WebhookEventRepository(BaseRepository[WebhookEvent]):
    def __init__(self) -> None:
        super().__init__(WebhookEvent)

    async def list_due_ids(
        self,
        session: AsyncSession,
        now: datetime,
        limit: int = 50,
    ) -> list[int]:
        """Eventos pendientes cuyo próximo intento ya venció, en orden de creación."""
        stmt = (
            select(WebhookEvent.id)
            .where(
                WebhookEvent.status == WebhookEventStatus.PENDING,
                or_(
                    WebhookEvent.next_attempt_at.is_(None),
                    WebhookEvent.next_attempt_at <= now,
                ),
            )
            .order_by(WebhookEvent.id.asc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def list_for_payment(
        self,
        session: AsyncSession,
        payment_id: int,
    ) -> Sequence[WebhookEvent]:
        stmt = (
            select(WebhookEvent)
            .where(WebhookEvent.payment_id == payment_id)
            .order_by(WebhookEvent.id.asc())
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def list_failed(
        self,
        session: AsyncSession,
        merchant: Optional[str] = None,
        limit: int = 100,
    ) -> Sequence[WebhookEvent]:
        stmt = select(WebhookEvent).where(
            WebhookEvent.status == WebhookEventStatus.PERMANENTLY_FAILED
        )
        if merchant is not None:
            stmt = stmt.where(WebhookEvent.merchant == merchant)
        stmt = stmt.order_by(WebhookEvent.id.desc()).limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()


__all__ = ["WebhookEventRepository"]
