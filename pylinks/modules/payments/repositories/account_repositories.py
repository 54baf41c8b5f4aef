# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/repositories/account_repositories.py

Repositorios de comercios, afiliados y suscripciones.

Autor: PyLinks
Fecha: 2026-10-05
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pylinks.shared.database.repository import BaseRepository
from pylinks.modules.payments.enums import SubscriptionStatus
from pylinks.modules.payments.models import Affiliate, Merchant, Subscription


class MerchantRepository(BaseRepository[Merchant]):
    def __init__(self) -> None:
        super().__init__(Merchant)

    async def get_by_wallet(self, session: AsyncSession, wallet: str) -> Optional[Merchant]:
        result = await session.execute(select(Merchant).where(Merchant.wallet_address == wallet))
        return result.scalars().first()

    async def get_by_api_key_hash(self, session: AsyncSession, key_hash: str) -> Optional[Merchant]:
        result = await session.execute(select(Merchant).where(Merchant.api_key_hash == key_hash))
        return result.scalars().first()


class AffiliateRepository(BaseRepository[Affiliate]):
    def __init__(self) -> None:
        super().__init__(Affiliate)

    async def get_by_wallet(self, session: AsyncSession, wallet: str) -> Optional[Affiliate]:
        result = await session.execute(select(Affiliate).where(Affiliate.wallet == wallet))
        return result.scalars().first()

    async def get_by_code(
        self,
        session: AsyncSession,
        code: str,
        *,
        for_update: bool = False,
    ) -> Optional[Affiliate]:
        stmt = select(Affiliate).where(Affiliate.referral_code == code)
        if for_update:
            stmt = stmt.with_for_update()
        result = await session.execute(stmt)
        return result.scalars().first()


class SubscriptionRepository(BaseRepository[Subscription]):
    def __init__(self) -> None:
        super().__init__(Subscription)

    async def list_due_ids(self, session: AsyncSession, now: datetime, limit: int = 200) -> list[int]:
        stmt = (
            select(Subscription.id)
            .where(
                Subscription.status == SubscriptionStatus.ACTIVE,
                Subscription.next_payment_at <= now,
            )
            .order_by(Subscription.next_payment_at.asc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())


__all__ = ["MerchantRepository", "AffiliateRepository", "SubscriptionRepository"]
