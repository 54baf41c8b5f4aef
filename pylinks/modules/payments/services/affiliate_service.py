# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/services/affiliate_service.py

Programa de afiliados: registro y consulta.

El volumen referido lo acredita el ledger al pasar un pago a paid.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pylinks.shared.config import PyLinksSettings
from pylinks.shared.database.database import session_scope
from pylinks.shared.utils.datetime_helpers import Clock, utcnow
from pylinks.modules.payments.enums import AffiliateTier
from pylinks.modules.payments.errors import AffiliateNotFound, Conflict, ValidationFailed
from pylinks.modules.payments.models import Affiliate
from pylinks.modules.payments.repositories import AffiliateRepository
from pylinks.modules.payments.services.ledger_service import normalize_party
from pylinks.modules.payments.utils.credentials import generate_referral_code

logger = logging.getLogger(__name__)

MAX_CODE_ATTEMPTS = 5


class AffiliateService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: PyLinksSettings,
        *,
        clock: Clock = utcnow,
    ):
        self.session_factory = session_factory
        self.settings = settings
        self.clock = clock
        self.affiliate_repo = AffiliateRepository()

    async def register_affiliate(self, wallet: str, name: str) -> Affiliate:
        wallet = normalize_party(wallet, "wallet")
        name = (name or "").strip()
        if not name:
            raise ValidationFailed("'name' es obligatorio")

        for attempt in range(1, MAX_CODE_ATTEMPTS + 1):
            async with session_scope(self.session_factory) as session:
                if await self.affiliate_repo.get_by_wallet(session, wallet) is not None:
                    raise Conflict(f"La wallet {wallet} ya es afiliada")

                code = generate_referral_code(self.settings.referral_code_length)
                if await self.affiliate_repo.get_by_code(session, code) is not None:
                    continue

                affiliate = Affiliate(
                    wallet=wallet,
                    name=name,
                    referral_code=code,
                    total_referrals=0,
                    total_volume=0,
                    tier=AffiliateTier.BRONZE,
                    created_at=self.clock(),
                )
                session.add(affiliate)
                try:
                    await session.commit()
                except IntegrityError:
                    await session.rollback()
                    logger.warning(f"[Affiliate] Colisión al registrar {wallet} (intento {attempt})")
                    continue

            logger.info(f"[Affiliate] Afiliado {affiliate.id} registrado con código {code}")
            return affiliate

        raise Conflict("No se pudo generar un código de referido único")

    async def get_affiliate(self, wallet: str) -> Affiliate:
        """getAffiliate por wallet."""
        wallet = normalize_party(wallet, "wallet")
        async with session_scope(self.session_factory) as session:
            affiliate = await self.affiliate_repo.get_by_wallet(session, wallet)
        if affiliate is None:
            raise AffiliateNotFound(wallet)
        return affiliate

    async def get_affiliate_by_code(self, code: str) -> Affiliate:
        code = (code or "").strip().upper()
        async with session_scope(self.session_factory) as session:
            affiliate = await self.affiliate_repo.get_by_code(session, code)
        if affiliate is None:
            raise AffiliateNotFound(code)
        return affiliate


__all__ = ["AffiliateService"]
