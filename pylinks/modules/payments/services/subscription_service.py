# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/services/subscription_service.py

Suscripciones: cargos recurrentes denominados en USD.

En cada vencimiento el barrido convierte el monto USD con el precio actual
del oráculo y crea un pago de tipo `subscription` con sessionId
`sub_<id>_<n>`. El pago y el avance de la suscripción se confirman en la
misma transacción, de modo que un cargo nunca se emite dos veces.

Autor: PyLinks
Fecha: 2026-10-07
"""

from __future__ import annotations

import logging
from datetime import timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pylinks.shared.config import PyLinksSettings
from pylinks.shared.database.database import session_scope
from pylinks.shared.utils.datetime_helpers import Clock, utcnow
from pylinks.modules.payments.adapters.price_oracle import PriceOracle
from pylinks.modules.payments.enums import PaymentType, SubscriptionStatus
from pylinks.modules.payments.errors import (
    InvalidAmount,
    InvalidState,
    NotAuthorized,
    PriceUnavailable,
    PyLinksError,
    SubscriptionNotFound,
    ValidationFailed,
)
from pylinks.modules.payments.metrics import observe_payment_created
from pylinks.modules.payments.models import Subscription
from pylinks.modules.payments.repositories import SubscriptionRepository
from pylinks.modules.payments.services.ledger_service import LedgerService, normalize_party
from pylinks.modules.payments.utils.amounts import to_fixed_point, usd_to_token_units

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86_400


def subscription_session_id(subscription_id: int, charge_number: int) -> str:
    return f"sub_{subscription_id}_{charge_number}"


class SubscriptionService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: PyLinksSettings,
        ledger: LedgerService,
        price_oracle: PriceOracle,
        *,
        clock: Clock = utcnow,
    ):
        self.session_factory = session_factory
        self.settings = settings
        self.ledger = ledger
        self.price_oracle = price_oracle
        self.clock = clock
        self.subscription_repo = SubscriptionRepository()

    async def create_subscription(
        self,
        merchant: str,
        customer: str,
        usd_amount: str,
        interval_days: int,
        max_payments: int = 0,
        auto_renew: bool = True,
        description: str = "",
    ) -> Subscription:
        """Crea la suscripción; el primer cargo se emite en el próximo barrido."""
        usd_units = to_fixed_point(usd_amount, self.settings.usd_decimals)
        if usd_units <= 0:
            raise InvalidAmount(usd_amount, self.settings.usd_decimals, "el monto debe ser mayor que cero")
        if interval_days < 1:
            raise ValidationFailed("interval_days debe ser al menos 1")
        if max_payments < 0:
            raise ValidationFailed("max_payments no puede ser negativo")
        description = description or ""
        if len(description) > self.settings.max_description_length:
            raise ValidationFailed(
                f"La descripción excede {self.settings.max_description_length} caracteres"
            )

        now = self.clock()
        subscription = Subscription(
            merchant=normalize_party(merchant, "merchant"),
            customer=normalize_party(customer, "customer"),
            description=description,
            usd_amount=usd_units,
            interval_seconds=interval_days * SECONDS_PER_DAY,
            next_payment_at=now,
            status=SubscriptionStatus.ACTIVE,
            max_payments=max_payments,
            payment_count=0,
            auto_renew=auto_renew,
            created_at=now,
        )
        async with session_scope(self.session_factory) as session:
            session.add(subscription)
            await session.commit()

        logger.info(
            f"[Subscription] Suscripción {subscription.id} creada: {subscription.merchant} ← "
            f"{subscription.customer} cada {interval_days} días"
        )
        return subscription

    async def get_subscription(self, subscription_id: int) -> Subscription:
        """getSubscription."""
        async with session_scope(self.session_factory) as session:
            subscription = await self.subscription_repo.get(session, subscription_id)
        if subscription is None:
            raise SubscriptionNotFound(subscription_id)
        return subscription

    async def cancel_subscription(self, subscription_id: int, caller: str) -> Subscription:
        """Cancela una suscripción activa; la puede cancelar el comercio o el cliente."""
        caller = normalize_party(caller, "caller")
        async with session_scope(self.session_factory) as session:
            subscription = await self.subscription_repo.get_for_update(session, subscription_id)
            if subscription is None:
                raise SubscriptionNotFound(subscription_id)
            if caller not in (subscription.merchant, subscription.customer):
                raise NotAuthorized(f"La suscripción {subscription_id} no pertenece a {caller}")
            if subscription.status is not SubscriptionStatus.ACTIVE:
                raise InvalidState(
                    f"La suscripción {subscription_id} no está activa ('{subscription.status.value}')"
                )
            subscription.status = SubscriptionStatus.CANCELLED
            subscription.cancelled_at = self.clock()
            await session.commit()

        logger.info(f"[Subscription] Suscripción {subscription_id} cancelada por {caller}")
        return subscription

    async def bill_due_subscriptions(self) -> int:
        """
        Barrido de facturación. Devuelve cuántos pagos se emitieron.

        El precio se lee una vez por barrido; si el oráculo no responde no
        se emite ningún cargo y se reintenta en el siguiente ciclo. Un cargo
        que el ledger rechaza (p. ej. sessionId ya ocupado) se omite: cuenta
        como cobro consumido y el calendario avanza.
        """
        async with session_scope(self.session_factory) as session:
            ids = await self.subscription_repo.list_due_ids(session, self.clock())
        if not ids:
            return 0

        try:
            price = await self.price_oracle.get_price()
        except PriceUnavailable:
            logger.warning(f"[Subscription] Oráculo no disponible; {len(ids)} cargos pospuestos")
            return 0

        billed = 0
        for subscription_id in ids:
            async with session_scope(self.session_factory) as session:
                subscription = await self.subscription_repo.get_for_update(session, subscription_id)
                now = self.clock()
                if (
                    subscription is None
                    or subscription.status is not SubscriptionStatus.ACTIVE
                    or subscription.next_payment_at > now
                ):
                    continue

                charge_number = subscription.payment_count + 1
                amount = usd_to_token_units(
                    subscription.usd_amount,
                    price,
                    usd_decimals=self.settings.usd_decimals,
                    token_decimals=self.settings.token_decimals,
                    price_decimals=self.settings.usd_decimals,
                )
                try:
                    payment, created = await self.ledger.add_record(
                        session,
                        merchant=subscription.merchant,
                        customer=subscription.customer,
                        amount=amount,
                        session_id=subscription_session_id(subscription.id, charge_number),
                        description=subscription.description,
                        payment_type=PaymentType.SUBSCRIPTION,
                        subscription_id=subscription.id,
                    )
                except PyLinksError as e:
                    # el cargo se omite y el calendario avanza igual; add_record
                    # valida antes de tocar la sesión
                    logger.error(
                        f"[Subscription] Cargo {charge_number} de {subscription_id} omitido: {e.message}"
                    )
                    payment, created = None, False

                interval = timedelta(seconds=subscription.interval_seconds)
                next_payment_at = subscription.next_payment_at + interval
                if next_payment_at <= now:
                    # no se acumulan cargos atrasados
                    next_payment_at = now + interval
                subscription.payment_count = charge_number
                subscription.next_payment_at = next_payment_at
                if not subscription.auto_renew or (
                    subscription.max_payments and charge_number >= subscription.max_payments
                ):
                    subscription.status = SubscriptionStatus.COMPLETED
                    subscription.completed_at = now

                try:
                    await session.commit()
                except IntegrityError as e:
                    await session.rollback()
                    logger.warning(
                        f"[Subscription] Cargo {charge_number} de {subscription_id} ya emitido: {e.orig!r}"
                    )
                    continue

            if created:
                billed += 1
                observe_payment_created(PaymentType.SUBSCRIPTION.value)
                logger.info(
                    f"[Subscription] Cargo {charge_number} de suscripción {subscription_id} → "
                    f"pago {payment.id} ({payment.amount} unidades)"
                )
        return billed


__all__ = ["SubscriptionService", "subscription_session_id"]

# Fin del archivo pylinks/modules/payments/services/subscription_service.py
