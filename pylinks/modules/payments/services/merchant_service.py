# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/services/merchant_service.py

Registro de comercios y credenciales.

- La API key se muestra una sola vez; en BD solo queda su sha256.
- Cambiar el endpoint de webhooks rota también el secreto de firma.

Autor: PyLinks
Fecha: 2026-10-06
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pylinks.shared.database.database import session_scope
from pylinks.shared.utils.datetime_helpers import Clock, utcnow
from pylinks.modules.payments.errors import Conflict, MerchantNotFound, NotAuthorized, ValidationFailed
from pylinks.modules.payments.models import Merchant
from pylinks.modules.payments.repositories import MerchantRepository
from pylinks.modules.payments.services.ledger_service import normalize_party
from pylinks.modules.payments.utils.credentials import (
    generate_api_key,
    generate_webhook_secret,
    hash_api_key,
)

logger = logging.getLogger(__name__)


def _validate_webhook_url(url: Optional[str]) -> Optional[str]:
    url = (url or "").strip()
    if not url:
        return None
    if not url.startswith(("https://", "http://")):
        raise ValidationFailed("webhook_url debe ser una URL http(s)")
    return url


class MerchantService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        clock: Clock = utcnow,
    ):
        self.session_factory = session_factory
        self.clock = clock
        self.merchant_repo = MerchantRepository()

    async def register_merchant(
        self,
        name: str,
        wallet_address: str,
        webhook_url: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Tuple[Merchant, str]:
        """
        Registra un comercio.

        Returns:
            (merchant, api_key en claro)

        Raises:
            Conflict: la wallet ya está registrada
        """
        name = (name or "").strip()
        if not name:
            raise ValidationFailed("'name' es obligatorio")
        wallet = normalize_party(wallet_address, "wallet_address")
        webhook_url = _validate_webhook_url(webhook_url)

        api_key = generate_api_key()
        async with session_scope(self.session_factory) as session:
            if await self.merchant_repo.get_by_wallet(session, wallet) is not None:
                raise Conflict(f"La wallet {wallet} ya está registrada")

            merchant = Merchant(
                name=name,
                email=email,
                wallet_address=wallet,
                api_key_hash=hash_api_key(api_key),
                webhook_url=webhook_url,
                webhook_secret=generate_webhook_secret() if webhook_url else None,
                is_active=True,
                created_at=self.clock(),
            )
            session.add(merchant)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise Conflict(f"La wallet {wallet} ya está registrada") from e

        logger.info(f"[Merchant] Comercio {merchant.id} registrado ({wallet})")
        return merchant, api_key

    async def authenticate(self, api_key: Optional[str]) -> Merchant:
        """Resuelve el comercio de una API key; 401 si falta, es inválida o está inactivo."""
        if not api_key:
            raise NotAuthorized("Falta la cabecera X-API-Key", http_status=401)
        async with session_scope(self.session_factory) as session:
            merchant = await self.merchant_repo.get_by_api_key_hash(session, hash_api_key(api_key))
        if merchant is None or not merchant.is_active:
            raise NotAuthorized("API key inválida", http_status=401)
        return merchant

    async def get_merchant(self, merchant_id: int) -> Merchant:
        async with session_scope(self.session_factory) as session:
            merchant = await self.merchant_repo.get(session, merchant_id)
        if merchant is None:
            raise MerchantNotFound(merchant_id)
        return merchant

    async def rotate_api_key(self, merchant_id: int) -> Tuple[Merchant, str]:
        api_key = generate_api_key()
        async with session_scope(self.session_factory) as session:
            merchant = await self.merchant_repo.get_for_update(session, merchant_id)
            if merchant is None:
                raise MerchantNotFound(merchant_id)
            merchant.api_key_hash = hash_api_key(api_key)
            await session.commit()
        logger.info(f"[Merchant] API key rotada para comercio {merchant_id}")
        return merchant, api_key

    async def update_webhook(self, merchant_id: int, webhook_url: Optional[str]) -> Merchant:
        """Cambia (o elimina con None) el endpoint; el secreto de firma se renueva."""
        webhook_url = _validate_webhook_url(webhook_url)
        async with session_scope(self.session_factory) as session:
            merchant = await self.merchant_repo.get_for_update(session, merchant_id)
            if merchant is None:
                raise MerchantNotFound(merchant_id)
            merchant.webhook_url = webhook_url
            merchant.webhook_secret = generate_webhook_secret() if webhook_url else None
            await session.commit()
        logger.info(f"[Merchant] Webhook actualizado para comercio {merchant_id}: {webhook_url}")
        return merchant


__all__ = ["MerchantService"]

# Fin del archivo pylinks/modules/payments/services/merchant_service.py
