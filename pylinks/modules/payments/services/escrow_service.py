# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/services/escrow_service.py

Escrow sobre el ledger de pagos.

- La creación lee el precio del oráculo una sola vez y fija el monto en
  token; si el oráculo falla no se persiste nada (PriceUnavailable).
- El precio capturado se usa también al liquidar: nunca se vuelve a leer,
  así la deriva del precio entre creación y liberación no altera el monto.
- Liberación: el cliente, o el barrido de auto-release al vencer hold_until
  si el pago no fue disputado.
- Disputa: comercio o cliente, estrictamente antes de hold_until. Una vez
  disputado, el auto-release queda deshabilitado de forma permanente y solo
  el árbitro de la plataforma puede resolver.

Autor: PyLinks
Fecha: 2026-10-06
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from pylinks.shared.config import PyLinksSettings
from pylinks.shared.database.database import session_scope
from pylinks.shared.utils.datetime_helpers import Clock, utcnow
from pylinks.modules.payments.adapters.price_oracle import PriceOracle
from pylinks.modules.payments.enums import DisputeOutcome, PaymentStatus, PaymentType
from pylinks.modules.payments.errors import (
    DisputeUnresolved,
    InvalidState,
    InvalidTransition,
    NotAuthorized,
    PaymentNotFound,
)
from pylinks.modules.payments.models import PaymentRecord
from pylinks.modules.payments.services.ledger_service import (
    EscrowTerms,
    LedgerService,
    normalize_party,
)
from pylinks.modules.payments.utils.amounts import to_fixed_point, usd_to_token_units

logger = logging.getLogger(__name__)

AUTO_RELEASE_ACTOR = "auto-release"


@dataclass(frozen=True)
class EscrowSettlement:
    """Resultado final de un escrow: a quién se entregaron los fondos."""
    payment_id: int
    status: PaymentStatus
    recipient: str
    amount: int
    usd_amount: int
    oracle_price: int
    resolution: Optional[DisputeOutcome]
    settled_at: Optional[datetime]


class EscrowService:
    def __init__(
        self,
        ledger: LedgerService,
        price_oracle: PriceOracle,
        settings: PyLinksSettings,
        *,
        clock: Clock = utcnow,
    ):
        self.ledger = ledger
        self.price_oracle = price_oracle
        self.settings = settings
        self.clock = clock

    @staticmethod
    def _require_escrow(payment: PaymentRecord) -> None:
        if payment.payment_type is not PaymentType.ESCROW or payment.escrow is None:
            raise PaymentNotFound(payment.id)

    async def create_escrow_payment(
        self,
        merchant: str,
        customer: str,
        usd_amount: str,
        session_id: str,
        description: str = "",
        auto_release: bool = True,
    ) -> PaymentRecord:
        """
        createEscrowPayment: convierte USD a token con el precio actual y crea el pago.

        Args:
            usd_amount: decimal en USD a 8 decimales ("100.00000000")

        Raises:
            PriceUnavailable: el oráculo no devolvió un precio válido
        """
        usd_units = to_fixed_point(usd_amount, self.settings.usd_decimals)
        price = await self.price_oracle.get_price()
        amount = usd_to_token_units(
            usd_units,
            price,
            usd_decimals=self.settings.usd_decimals,
            token_decimals=self.settings.token_decimals,
            price_decimals=self.settings.usd_decimals,
        )
        merchant = normalize_party(merchant, "merchant")
        payment = await self.ledger.create_record(
            merchant=merchant,
            customer=normalize_party(customer, "customer"),
            pay_to=self.settings.escrow_address or merchant,
            amount=amount,
            session_id=session_id,
            description=description,
            payment_type=PaymentType.ESCROW,
            escrow_terms=EscrowTerms(usd_amount=usd_units, oracle_price=price, auto_release=auto_release),
        )
        return payment

    async def get_escrow_payment(self, payment_id: int) -> PaymentRecord:
        payment = await self.ledger.get_payment(payment_id)
        self._require_escrow(payment)
        return payment

    async def release_escrow_payment(self, payment_id: int, caller: str) -> PaymentRecord:
        """releaseEscrowPayment: escrowed → paid, solo por el cliente."""
        caller = normalize_party(caller, "caller")

        def guard(payment: PaymentRecord, now: datetime) -> None:
            self._require_escrow(payment)
            if payment.status is PaymentStatus.DISPUTED:
                raise DisputeUnresolved(payment.id)
            if payment.customer != caller:
                raise NotAuthorized(f"Solo el cliente puede liberar el escrow {payment.id}")

        def mark(payment: PaymentRecord, now: datetime) -> None:
            payment.escrow.released_by = caller

        return await self.ledger.transition(payment_id, PaymentStatus.PAID, guard=guard, mutate=mark)

    async def dispute_escrow_payment(self, payment_id: int, caller: str) -> PaymentRecord:
        """disputeEscrowPayment: escrowed → disputed antes de hold_until."""
        caller = normalize_party(caller, "caller")

        def guard(payment: PaymentRecord, now: datetime) -> None:
            self._require_escrow(payment)
            if caller not in (payment.merchant, payment.customer):
                raise NotAuthorized(f"Solo comercio o cliente pueden disputar el escrow {payment.id}")
            if payment.status is PaymentStatus.ESCROWED and now >= payment.escrow.hold_until:
                raise InvalidState(f"El periodo de retención del escrow {payment.id} ya terminó")

        def mark(payment: PaymentRecord, now: datetime) -> None:
            payment.escrow.disputed = True
            payment.escrow.disputed_by = caller
            payment.escrow.disputed_at = now

        payment = await self.ledger.transition(
            payment_id, PaymentStatus.DISPUTED, guard=guard, mutate=mark
        )
        logger.warning(f"[Escrow] Pago {payment_id} disputado por {caller}; auto-release deshabilitado")
        return payment

    async def resolve_dispute(
        self,
        payment_id: int,
        outcome: DisputeOutcome,
        arbiter: str,
    ) -> PaymentRecord:
        """Resolución manual del árbitro: disputed → paid | refunded."""
        target = PaymentStatus.PAID if outcome is DisputeOutcome.RELEASE else PaymentStatus.REFUNDED

        def guard(payment: PaymentRecord, now: datetime) -> None:
            self._require_escrow(payment)
            if payment.status is not PaymentStatus.DISPUTED:
                raise InvalidState(f"El escrow {payment.id} no está en disputa")

        def mark(payment: PaymentRecord, now: datetime) -> None:
            payment.escrow.resolution = outcome
            payment.escrow.resolved_by = arbiter
            payment.escrow.resolved_at = now
            if outcome is DisputeOutcome.RELEASE:
                payment.escrow.released_by = arbiter

        payment = await self.ledger.transition(payment_id, target, guard=guard, mutate=mark)
        logger.info(f"[Escrow] Disputa del pago {payment_id} resuelta: {outcome.value} por {arbiter}")
        return payment

    async def refund_escrow_payment(self, payment_id: int, merchant: str) -> PaymentRecord:
        """escrowed → refunded por el comercio; en disputa requiere al árbitro."""

        def guard(payment: PaymentRecord, now: datetime) -> None:
            self._require_escrow(payment)
            self.ledger.require_owner(payment, merchant)
            if payment.status is PaymentStatus.DISPUTED:
                raise DisputeUnresolved(payment.id)

        return await self.ledger.transition(payment_id, PaymentStatus.REFUNDED, guard=guard)

    async def auto_release_due(self) -> int:
        """Barrido: libera los escrows con hold_until cumplido y sin disputa."""
        async with session_scope(self.ledger.session_factory) as session:
            ids = await self.ledger.payment_repo.list_escrow_due_for_release(session, self.clock())

        def guard(payment: PaymentRecord, now: datetime) -> None:
            escrow = payment.escrow
            if payment.status is not PaymentStatus.ESCROWED:
                raise InvalidState(f"El escrow {payment.id} ya no está retenido")
            if escrow.disputed or not escrow.auto_release or now < escrow.hold_until:
                raise InvalidState(f"El escrow {payment.id} no califica para auto-release")

        def mark(payment: PaymentRecord, now: datetime) -> None:
            payment.escrow.released_by = AUTO_RELEASE_ACTOR

        released = 0
        for payment_id in ids:
            try:
                await self.ledger.transition(payment_id, PaymentStatus.PAID, guard=guard, mutate=mark)
                released += 1
            except (InvalidState, InvalidTransition) as e:
                # disputado o liberado entre la consulta y el lock
                logger.info(f"[Escrow] Auto-release omitido para {payment_id}: {e.message}")
        if released:
            logger.info(f"[Escrow] Auto-release: {released} escrows liberados")
        return released

    async def get_settlement(self, payment_id: int) -> EscrowSettlement:
        """
        Liquidación final del escrow.

        Raises:
            DisputeUnresolved: la disputa aún no fue resuelta
            InvalidState: el escrow todavía no se liquidó
        """
        payment = await self.get_escrow_payment(payment_id)
        if payment.status is PaymentStatus.DISPUTED:
            raise DisputeUnresolved(payment.id)
        if payment.status not in (PaymentStatus.PAID, PaymentStatus.REFUNDED):
            raise InvalidState(
                f"El escrow {payment.id} aún no se liquida (estado '{payment.status.value}')"
            )

        released = payment.status is PaymentStatus.PAID
        return EscrowSettlement(
            payment_id=payment.id,
            status=payment.status,
            recipient=payment.merchant if released else payment.customer,
            amount=payment.amount,
            usd_amount=payment.escrow.usd_amount,
            oracle_price=payment.escrow.oracle_price,
            resolution=payment.escrow.resolution,
            settled_at=payment.paid_at if released else payment.refunded_at,
        )


__all__ = ["EscrowService", "EscrowSettlement", "AUTO_RELEASE_ACTOR"]

# Fin del archivo pylinks/modules/payments/services/escrow_service.py
