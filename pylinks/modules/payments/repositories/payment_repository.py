# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/repositories/payment_repository.py

Acceso a datos de PaymentRecord y SessionCredit.

Autor: PyLinks
Fecha: 2026-10-04
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pylinks.shared.database.repository import BaseRepository
from pylinks.modules.payments.enums import PaymentStatus, PaymentType
from pylinks.modules.payments.models import EscrowDetails, PaymentRecord, SessionCredit


class PaymentRepository(BaseRepository[PaymentRecord]):
    def __init__(self) -> None:
        super().__init__(PaymentRecord)

    async def get_by_merchant_session(
        self,
        session: AsyncSession,
        merchant: str,
        session_id: str,
    ) -> Optional[PaymentRecord]:
        stmt = select(PaymentRecord).where(
            PaymentRecord.merchant == merchant,
            PaymentRecord.session_id == session_id,
        )
        result = await session.execute(stmt)
        return result.scalars().first()

    async def find_by_reference(
        self,
        session: AsyncSession,
        *,
        reference: str,
        pay_to: str,
    ) -> Sequence[PaymentRecord]:
        """Candidatos para una transferencia: mismo sessionId y mismo destinatario."""
        stmt = (
            select(PaymentRecord)
            .where(
                PaymentRecord.session_id == reference,
                PaymentRecord.pay_to == pay_to,
            )
            .order_by(PaymentRecord.id.asc())
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def list_for_merchant(
        self,
        session: AsyncSession,
        merchant: str,
        *,
        status: Optional[PaymentStatus] = None,
        payment_type: Optional[PaymentType] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Sequence[PaymentRecord]:
        stmt = select(PaymentRecord).where(PaymentRecord.merchant == merchant)
        if status is not None:
            stmt = stmt.where(PaymentRecord.status == status)
        if payment_type is not None:
            stmt = stmt.where(PaymentRecord.payment_type == payment_type)
        stmt = stmt.order_by(PaymentRecord.id.desc()).limit(limit).offset(offset)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def list_overdue_ids(
        self,
        session: AsyncSession,
        now: datetime,
        limit: int = 500,
    ) -> list[int]:
        """IDs en created con expires_at vencido (para el barrido)."""
        stmt = (
            select(PaymentRecord.id)
            .where(
                PaymentRecord.status == PaymentStatus.CREATED,
                PaymentRecord.expires_at < now,
            )
            .order_by(PaymentRecord.expires_at.asc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def list_escrow_due_for_release(
        self,
        session: AsyncSession,
        now: datetime,
        limit: int = 500,
    ) -> list[int]:
        """Escrows retenidos, sin disputa, con auto-release y hold_until cumplido."""
        stmt = (
            select(PaymentRecord.id)
            .join(EscrowDetails, EscrowDetails.payment_id == PaymentRecord.id)
            .where(
                PaymentRecord.status == PaymentStatus.ESCROWED,
                EscrowDetails.auto_release.is_(True),
                EscrowDetails.disputed.is_(False),
                EscrowDetails.hold_until <= now,
            )
            .order_by(EscrowDetails.hold_until.asc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())


class SessionCreditRepository(BaseRepository[SessionCredit]):
    def __init__(self) -> None:
        super().__init__(SessionCredit)

    async def is_credited(self, session: AsyncSession, session_id: str) -> bool:
        return await session.get(SessionCredit, session_id) is not None


__all__ = ["PaymentRepository", "SessionCreditRepository"]

# Fin del archivo pylinks/modules/payments/repositories/payment_repository.py
