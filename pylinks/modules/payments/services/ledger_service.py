# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/services/ledger_service.py

Ledger de pagos: estado autoritativo de cada PaymentRecord.

Flujos cubiertos:
- Crear pagos de forma idempotente por (merchant, sessionId)
- Transiciones validadas contra el mapa por tipo de pago
- Expiración perezosa (en lectura / transición) y por barrido periódico
- Aplicar transferencias confirmadas (created → paid | escrowed)
- Reparto en créditos al llegar a paid, una sola vez por sessionId
- Cancelación y reembolso iniciados por el comercio

Concurrencia:
- Lock asyncio por payment_id dentro del proceso
- SELECT ... FOR UPDATE donde la base lo soporta
- Columna `version` (optimista): escrituras viejas → InvalidTransition

Cada transición escribe su evento de webhook en la misma transacción.

Autor: PyLinks
Fecha: 2026-10-05
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Sequence, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from pylinks.shared.config import PyLinksSettings
from pylinks.shared.database.database import session_scope
from pylinks.shared.utils.datetime_helpers import Clock, utcnow
from pylinks.shared.utils.keyed_lock import KeyedLock
from pylinks.modules.payments.adapters.chain_source import ChainTransfer
from pylinks.modules.payments.enums import (
    FUNDED_STATUS,
    PaymentStatus,
    PaymentType,
    TransferOutcome,
    TransferStatus,
    validate_state_transition,
)
from pylinks.modules.payments.errors import (
    AffiliateNotFound,
    DuplicateSession,
    InvalidAmount,
    InvalidState,
    InvalidTransition,
    NotAuthorized,
    PaymentNotFound,
    ValidationFailed,
)
from pylinks.modules.payments.metrics import (
    observe_payment_created,
    observe_transfer_outcome,
    observe_transition,
)
from pylinks.modules.payments.models import (
    CreditEntry,
    EscrowDetails,
    ObservedTransfer,
    PaymentRecord,
    PaymentSplit,
    SessionCredit,
)
from pylinks.modules.payments.repositories import (
    AffiliateRepository,
    PaymentRepository,
    SessionCreditRepository,
)
from pylinks.modules.payments.services.webhook_outbox import WebhookOutbox
from pylinks.modules.payments.utils.amounts import to_fixed_point
from pylinks.modules.payments.utils.splits import SplitSpec, compute_credits, validate_splits

logger = logging.getLogger(__name__)

# Validación previa a la transición; lanza para abortarla
Guard = Callable[[PaymentRecord, datetime], None]
# Cambios adicionales aplicados junto con la transición
Mutation = Callable[[PaymentRecord, datetime], None]

_TIMESTAMP_FIELDS = {
    PaymentStatus.PAID: "paid_at",
    PaymentStatus.EXPIRED: "expired_at",
    PaymentStatus.CANCELLED: "cancelled_at",
    PaymentStatus.REFUNDED: "refunded_at",
    PaymentStatus.ESCROWED: "funded_at",
}

MAX_SESSION_ID_LENGTH = 128


@dataclass(frozen=True)
class EscrowTerms:
    """Condiciones de escrow fijadas al crear el pago."""
    usd_amount: int
    oracle_price: int
    auto_release: bool = True


def normalize_party(value: Optional[str], field: str) -> str:
    """Identificadores de comercio/cliente/destinatario en minúsculas y sin espacios."""
    normalized = (value or "").strip().lower()
    if not normalized:
        raise ValidationFailed(f"'{field}' es obligatorio")
    return normalized


class LedgerService:
    """
    Servicio para gestionar el ciclo de vida de un PaymentRecord.

    Recibe la configuración, el reloj y la fábrica de sesiones por
    constructor; no lee estado global.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        settings: PyLinksSettings,
        *,
        clock: Clock = utcnow,
        locks: Optional[KeyedLock] = None,
        outbox: Optional[WebhookOutbox] = None,
    ) -> None:
        self.session_factory = session_factory
        self.settings = settings
        self.clock = clock
        self.locks = locks or KeyedLock()
        self.outbox = outbox or WebhookOutbox(settings)
        self.payment_repo = PaymentRepository()
        self.credit_repo = SessionCreditRepository()
        self.affiliate_repo = AffiliateRepository()

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    @staticmethod
    def is_overdue(payment: PaymentRecord, now: datetime) -> bool:
        return payment.status is PaymentStatus.CREATED and now > payment.expires_at

    def _expiry_for(self, payment_type: PaymentType, created_at: datetime) -> datetime:
        minutes = self.settings.session_expiry_minutes
        if payment_type is PaymentType.REGULAR:
            minutes = min(minutes, self.settings.regular_payment_hard_expiry_minutes)
        return created_at + timedelta(minutes=minutes)

    @staticmethod
    def require_owner(payment: PaymentRecord, merchant: str) -> None:
        if payment.merchant != (merchant or "").strip().lower():
            raise NotAuthorized(f"El pago {payment.id} no pertenece a este comercio")

    async def _load_for_update(self, session: AsyncSession, payment_id: int) -> PaymentRecord:
        payment = await self.payment_repo.get_for_update(session, payment_id)
        if payment is None:
            raise PaymentNotFound(payment_id)
        return payment

    @staticmethod
    def _matches_existing(
        existing: PaymentRecord,
        *,
        amount: int,
        description: str,
        splits: Sequence[SplitSpec],
        payment_type: PaymentType,
        customer: Optional[str],
        referral_code: Optional[str],
        escrow_terms: Optional[EscrowTerms],
    ) -> bool:
        """Una re-solicitud es replay solo si coincide en todos los parámetros."""
        if existing.payment_type is not payment_type:
            return False
        if existing.description != description or existing.referral_code != referral_code:
            return False
        if [(s.recipient, s.bps) for s in existing.splits] != [(s.recipient, s.bps) for s in splits]:
            return False
        if escrow_terms is not None:
            # el monto en token depende del precio del momento; se compara el USD
            escrow = existing.escrow
            return (
                escrow is not None
                and escrow.usd_amount == escrow_terms.usd_amount
                and escrow.auto_release == escrow_terms.auto_release
                and existing.customer == customer
            )
        return existing.amount == amount

    # ------------------------------------------------------------------ #
    # Creación
    # ------------------------------------------------------------------ #
    async def add_record(
        self,
        session: AsyncSession,
        *,
        merchant: str,
        amount: int,
        session_id: str,
        description: str = "",
        splits: Sequence[SplitSpec] = (),
        payment_type: PaymentType = PaymentType.REGULAR,
        customer: Optional[str] = None,
        pay_to: Optional[str] = None,
        referral_code: Optional[str] = None,
        subscription_id: Optional[int] = None,
        escrow_terms: Optional[EscrowTerms] = None,
    ) -> Tuple[PaymentRecord, bool]:
        """
        Inserta un pago en `session` sin confirmar la transacción.

        Returns:
            (pago, creado). `creado` es False en un replay idempotente.

        Raises:
            DuplicateSession: sessionId existente con otros parámetros, o ya acreditado.
        """
        merchant = normalize_party(merchant, "merchant")
        customer = normalize_party(customer, "customer") if customer else None
        pay_to = normalize_party(pay_to, "pay_to") if pay_to else merchant

        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidAmount(amount, self.settings.token_decimals, "el monto debe ser mayor que cero")

        session_id = (session_id or "").strip()
        if not session_id or len(session_id) > MAX_SESSION_ID_LENGTH:
            raise ValidationFailed(f"sessionId debe tener entre 1 y {MAX_SESSION_ID_LENGTH} caracteres")

        description = description or ""
        if len(description) > self.settings.max_description_length:
            raise ValidationFailed(
                f"La descripción excede {self.settings.max_description_length} caracteres"
            )

        splits = [SplitSpec(normalize_party(s.recipient, "split.recipient"), s.bps) for s in splits]
        validate_splits(splits)

        if payment_type is PaymentType.ESCROW and escrow_terms is None:
            raise ValueError("Un pago escrow requiere EscrowTerms")

        referral_code = referral_code.strip().upper() if referral_code else None

        existing = await self.payment_repo.get_by_merchant_session(session, merchant, session_id)
        if existing is not None:
            if self._matches_existing(
                existing,
                amount=amount,
                description=description,
                splits=splits,
                payment_type=payment_type,
                customer=customer,
                referral_code=referral_code,
                escrow_terms=escrow_terms,
            ):
                logger.info(f"[Ledger] Replay idempotente de sesión {session_id} → pago {existing.id}")
                return existing, False
            raise DuplicateSession(
                session_id, f"La sesión {session_id} ya existe con parámetros distintos"
            )

        if await self.credit_repo.is_credited(session, session_id):
            raise DuplicateSession(session_id, f"La sesión {session_id} ya fue acreditada")

        if referral_code and await self.affiliate_repo.get_by_code(session, referral_code) is None:
            raise AffiliateNotFound(referral_code)

        now = self.clock()
        payment = PaymentRecord(
            merchant=merchant,
            customer=customer,
            pay_to=pay_to,
            amount=amount,
            session_id=session_id,
            description=description,
            payment_type=payment_type,
            status=PaymentStatus.CREATED,
            referral_code=referral_code,
            subscription_id=subscription_id,
            created_at=now,
            expires_at=self._expiry_for(payment_type, now),
            splits=[
                PaymentSplit(position=i, recipient=s.recipient, bps=s.bps)
                for i, s in enumerate(splits)
            ],
            credits=[],
            escrow=None,
        )
        if escrow_terms is not None:
            payment.escrow = EscrowDetails(
                usd_amount=escrow_terms.usd_amount,
                oracle_price=escrow_terms.oracle_price,
                hold_until=now + timedelta(days=self.settings.escrow_hold_days),
                auto_release=escrow_terms.auto_release,
                disputed=False,
            )
        session.add(payment)
        await session.flush()
        return payment, True

    async def create_record(self, **fields) -> PaymentRecord:
        """add_record en su propia transacción, con reintento ante carrera de inserción."""
        async with session_scope(self.session_factory) as session:
            try:
                payment, created = await self.add_record(session, **fields)
                await session.commit()
            except IntegrityError:
                await session.rollback()
                logger.warning(
                    f"[Ledger] Inserción concurrente de sesión {fields.get('session_id')}; reintentando como replay"
                )
                payment, created = await self.add_record(session, **fields)
                await session.commit()

        if created:
            observe_payment_created(payment.payment_type.value)
            logger.info(
                f"[Ledger] Pago {payment.id} creado ({payment.payment_type.value}) "
                f"merchant={payment.merchant} amount={payment.amount} expires_at={payment.expires_at.isoformat()}"
            )
        return payment

    async def create_payment(
        self,
        merchant: str,
        amount: str,
        session_id: str,
        description: str = "",
        splits: Optional[Sequence[SplitSpec]] = None,
        *,
        customer: Optional[str] = None,
        referral_code: Optional[str] = None,
    ) -> PaymentRecord:
        """
        createPayment: crea un pago regular en estado created.

        `amount` es texto decimal a la precisión del token ("25.000000").
        """
        units = to_fixed_point(amount, self.settings.token_decimals)
        return await self.create_record(
            merchant=merchant,
            amount=units,
            session_id=session_id,
            description=description,
            splits=splits or (),
            payment_type=PaymentType.REGULAR,
            customer=customer,
            referral_code=referral_code,
        )

    # ------------------------------------------------------------------ #
    # Lectura
    # ------------------------------------------------------------------ #
    async def get_payment(self, payment_id: int) -> PaymentRecord:
        """getPayment: expira el registro si venció antes de devolverlo."""
        async with session_scope(self.session_factory) as session:
            payment = await self.payment_repo.get(session, payment_id)
        if payment is None:
            raise PaymentNotFound(payment_id)
        if self.is_overdue(payment, self.clock()):
            payment, _ = await self._expire_if_overdue(payment_id)
        return payment

    async def list_payments(
        self,
        merchant: str,
        *,
        status: Optional[PaymentStatus] = None,
        payment_type: Optional[PaymentType] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[PaymentRecord]:
        async with session_scope(self.session_factory) as session:
            payments = list(
                await self.payment_repo.list_for_merchant(
                    session,
                    normalize_party(merchant, "merchant"),
                    status=status,
                    payment_type=payment_type,
                    limit=limit,
                    offset=offset,
                )
            )
        now = self.clock()
        for i, payment in enumerate(payments):
            if self.is_overdue(payment, now):
                payments[i], _ = await self._expire_if_overdue(payment.id)
        return payments

    # ------------------------------------------------------------------ #
    # Transiciones
    # ------------------------------------------------------------------ #
    async def _settle(self, session: AsyncSession, payment: PaymentRecord, now: datetime) -> None:
        """Créditos por destinatario, marca de sesión acreditada y referido."""
        if await self.credit_repo.is_credited(session, payment.session_id):
            raise DuplicateSession(payment.session_id, f"La sesión {payment.session_id} ya fue acreditada")

        lines = compute_credits(
            payment.amount,
            [SplitSpec(s.recipient, s.bps) for s in payment.splits],
            merchant=payment.merchant,
            fee_bps=self.settings.platform_fee_bps,
            treasury=self.settings.treasury_address.lower(),
        )
        for line in lines:
            payment.credits.append(
                CreditEntry(recipient=line.recipient, amount=line.amount, kind=line.kind, created_at=now)
            )
        session.add(SessionCredit(session_id=payment.session_id, payment_id=payment.id, credited_at=now))

        if payment.referral_code:
            affiliate = await self.affiliate_repo.get_by_code(session, payment.referral_code, for_update=True)
            if affiliate is None:
                logger.warning(f"[Ledger] Código de referido {payment.referral_code} ya no existe")
            else:
                affiliate.record_referral(payment.amount)

    async def _apply(
        self,
        session: AsyncSession,
        payment: PaymentRecord,
        to_status: PaymentStatus,
        now: datetime,
        mutate: Optional[Mutation] = None,
    ) -> PaymentStatus:
        from_status = payment.status
        validate_state_transition(payment.payment_type, from_status, to_status)

        payment.status = to_status
        stamp = _TIMESTAMP_FIELDS.get(to_status)
        if stamp:
            setattr(payment, stamp, now)
        if mutate is not None:
            mutate(payment, now)
        if to_status is PaymentStatus.PAID:
            await self._settle(session, payment, now)

        await self.outbox.enqueue(session, payment, now)
        return from_status

    async def _commit(self, session: AsyncSession, payment_id: int, session_id: str) -> None:
        try:
            await session.commit()
        except StaleDataError as e:
            await session.rollback()
            raise InvalidTransition(
                "?", "?", f"El pago {payment_id} fue modificado concurrentemente"
            ) from e
        except IntegrityError as e:
            await session.rollback()
            raise DuplicateSession(session_id, f"La sesión {session_id} ya fue acreditada") from e

    @staticmethod
    def _after_commit(payment: PaymentRecord, from_status: PaymentStatus) -> None:
        observe_transition(payment.payment_type.value, payment.status.value)
        logger.info(
            f"[Ledger] Pago {payment.id} ({payment.payment_type.value}): "
            f"{from_status.value} → {payment.status.value}"
        )

    async def _expire_if_overdue(self, payment_id: int) -> Tuple[PaymentRecord, bool]:
        async with self.locks.hold(payment_id):
            async with session_scope(self.session_factory) as session:
                payment = await self._load_for_update(session, payment_id)
                if not self.is_overdue(payment, self.clock()):
                    return payment, False
                from_status = await self._apply(session, payment, PaymentStatus.EXPIRED, self.clock())
                await self._commit(session, payment.id, payment.session_id)
        self._after_commit(payment, from_status)
        return payment, True

    async def transition(
        self,
        payment_id: int,
        to_status: PaymentStatus,
        *,
        guard: Optional[Guard] = None,
        mutate: Optional[Mutation] = None,
    ) -> PaymentRecord:
        """
        Aplica una transición bajo el lock del registro.

        Orden: guard → expiración perezosa → validación del mapa → cambios.
        Si el registro venció, se confirma la expiración y la transición
        pedida falla con InvalidTransition.
        """
        expired_instead = False
        async with self.locks.hold(payment_id):
            async with session_scope(self.session_factory) as session:
                payment = await self._load_for_update(session, payment_id)
                now = self.clock()
                if guard is not None:
                    guard(payment, now)

                if to_status is not PaymentStatus.EXPIRED and self.is_overdue(payment, now):
                    from_status = await self._apply(session, payment, PaymentStatus.EXPIRED, now)
                    expired_instead = True
                else:
                    from_status = await self._apply(session, payment, to_status, now, mutate)
                await self._commit(session, payment.id, payment.session_id)

        self._after_commit(payment, from_status)
        if expired_instead:
            raise InvalidTransition(
                from_status.value,
                to_status.value,
                f"El pago {payment_id} expiró antes de la transición a '{to_status.value}'",
            )
        return payment

    async def cancel_payment(self, payment_id: int, merchant: str) -> PaymentRecord:
        """created → cancelled, solo por el comercio dueño."""

        def guard(payment: PaymentRecord, now: datetime) -> None:
            self.require_owner(payment, merchant)

        return await self.transition(payment_id, PaymentStatus.CANCELLED, guard=guard)

    async def refund_payment(self, payment_id: int, merchant: str) -> PaymentRecord:
        """paid → refunded dentro de la ventana de reembolso; si no, InvalidState."""
        window = timedelta(days=self.settings.refund_window_days)

        def guard(payment: PaymentRecord, now: datetime) -> None:
            self.require_owner(payment, merchant)
            if payment.payment_type is PaymentType.ESCROW:
                raise InvalidState("Los pagos escrow se reembolsan por el flujo de escrow")
            if payment.status is not PaymentStatus.PAID:
                raise InvalidState(
                    f"Solo se reembolsan pagos en 'paid' (estado actual: '{payment.status.value}')"
                )
            if now - payment.paid_at > window:
                raise InvalidState(
                    f"La ventana de reembolso de {self.settings.refund_window_days} días ya venció"
                )

        return await self.transition(payment_id, PaymentStatus.REFUNDED, guard=guard)

    async def expire_payment(self, payment_id: int) -> PaymentRecord:
        """created → expired; InvalidState si todavía no vence."""

        def guard(payment: PaymentRecord, now: datetime) -> None:
            if payment.status is PaymentStatus.CREATED and not self.is_overdue(payment, now):
                raise InvalidState(f"El pago {payment.id} aún no vence")

        return await self.transition(payment_id, PaymentStatus.EXPIRED, guard=guard)

    async def expire_overdue(self) -> int:
        """Barrido: expira todos los pagos created vencidos. Devuelve cuántos."""
        async with session_scope(self.session_factory) as session:
            ids = await self.payment_repo.list_overdue_ids(session, self.clock())
        expired = 0
        for payment_id in ids:
            _, changed = await self._expire_if_overdue(payment_id)
            expired += int(changed)
        if expired:
            logger.info(f"[Ledger] Barrido de expiración: {expired} pagos expirados")
        return expired

    # ------------------------------------------------------------------ #
    # Transferencias confirmadas
    # ------------------------------------------------------------------ #
    async def _mark_observation(
        self,
        session: AsyncSession,
        observation_id: Optional[int],
        outcome: TransferOutcome,
        payment_id: Optional[int],
        now: datetime,
    ) -> None:
        if observation_id is None:
            return
        observation = await session.get(ObservedTransfer, observation_id)
        if observation is None:
            return
        observation.status = (
            TransferStatus.APPLIED if outcome is TransferOutcome.APPLIED else TransferStatus.REJECTED
        )
        observation.outcome = outcome.value
        observation.payment_id = payment_id
        observation.processed_at = now

    async def _record_outcome(
        self,
        observation_id: Optional[int],
        outcome: TransferOutcome,
        payment_id: Optional[int],
    ) -> None:
        if observation_id is None:
            return
        async with session_scope(self.session_factory) as session:
            await self._mark_observation(session, observation_id, outcome, payment_id, self.clock())
            await session.commit()

    async def apply_confirmed_transfer(
        self,
        transfer: ChainTransfer,
        *,
        observation_id: Optional[int] = None,
    ) -> TransferOutcome:
        """
        Aplica una transferencia ya confirmada al pago que coincide.

        Coincidencia: referencia == sessionId, destinatario == pay_to y monto
        exacto. Gana la primera confirmación; una transferencia que llega
        después de expires_at expira el pago y se rechaza.
        """
        reference = (transfer.reference or "").strip()
        recipient = transfer.recipient.lower()

        candidates: Sequence[PaymentRecord] = ()
        if reference:
            async with session_scope(self.session_factory) as session:
                candidates = await self.payment_repo.find_by_reference(
                    session, reference=reference, pay_to=recipient
                )

        match = next(
            (
                p for p in candidates
                if p.amount == transfer.amount and p.status is PaymentStatus.CREATED
            ),
            None,
        )
        if match is None:
            outcome = (
                TransferOutcome.NOT_PENDING
                if any(p.amount == transfer.amount for p in candidates)
                else TransferOutcome.NO_MATCH
            )
            logger.warning(
                f"[Ledger] Transferencia {transfer.tx_hash}:{transfer.log_index} rechazada ({outcome.value}) "
                f"ref={reference!r} to={recipient} amount={transfer.amount}"
            )
            await self._record_outcome(observation_id, outcome, None)
            observe_transfer_outcome(outcome.value)
            return outcome

        changed_from: Optional[PaymentStatus] = None
        async with self.locks.hold(match.id):
            async with session_scope(self.session_factory) as session:
                payment = await self._load_for_update(session, match.id)
                now = self.clock()

                if payment.status is not PaymentStatus.CREATED or payment.amount != transfer.amount:
                    outcome = TransferOutcome.NOT_PENDING
                elif self.is_overdue(payment, now):
                    changed_from = await self._apply(session, payment, PaymentStatus.EXPIRED, now)
                    outcome = TransferOutcome.EXPIRED
                elif await self.credit_repo.is_credited(session, payment.session_id):
                    outcome = TransferOutcome.DUPLICATE_SESSION
                else:
                    def funded(p: PaymentRecord, _now: datetime) -> None:
                        p.tx_hash = transfer.tx_hash
                        p.block_number = transfer.block_number
                        if p.customer is None:
                            p.customer = transfer.sender.lower()

                    changed_from = await self._apply(
                        session, payment, FUNDED_STATUS[payment.payment_type], now, funded
                    )
                    outcome = TransferOutcome.APPLIED

                await self._mark_observation(session, observation_id, outcome, payment.id, now)
                payment_id, session_id = payment.id, payment.session_id
                try:
                    await self._commit(session, payment_id, session_id)
                except DuplicateSession:
                    changed_from = None
                    outcome = TransferOutcome.DUPLICATE_SESSION

        if outcome is TransferOutcome.DUPLICATE_SESSION:
            await self._record_outcome(observation_id, outcome, payment_id)

        if changed_from is not None:
            self._after_commit(payment, changed_from)
        if outcome is TransferOutcome.APPLIED:
            logger.info(
                f"[Ledger] Transferencia {transfer.tx_hash}:{transfer.log_index} aplicada al pago {payment_id}"
            )
        else:
            logger.warning(
                f"[Ledger] Transferencia {transfer.tx_hash}:{transfer.log_index} rechazada "
                f"({outcome.value}) para pago {payment_id}"
            )
        observe_transfer_outcome(outcome.value)
        return outcome


__all__ = ["LedgerService", "EscrowTerms", "Guard", "Mutation", "normalize_party"]

# Fin del archivo pylinks/modules/payments/services/ledger_service.py
