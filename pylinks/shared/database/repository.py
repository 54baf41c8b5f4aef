# -*- coding: utf-8 -*-
"""
pylinks/shared/database/repository.py

Repositorio base de PyLinks.

Los registros del ledger nunca se borran: el repositorio base solo lee por
id, con o sin bloqueo de fila. Las consultas propias de cada tabla viven en
pylinks/modules/payments/repositories/.

Autor: PyLinks
Fecha: 2026-10-02
"""

from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

ModelT = TypeVar("ModelT")


class BaseRepository(Generic[ModelT]):
    def __init__(self, model: Type[ModelT]):
        self.model = model

    async def get(self, session: AsyncSession, obj_id: Any) -> Optional[ModelT]:
        return await session.get(self.model, obj_id)

    async def get_for_update(self, session: AsyncSession, obj_id: Any) -> Optional[ModelT]:
        """
        SELECT ... FOR UPDATE sobre la fila `obj_id`.

        populate_existing refresca la instancia si ya estaba en la sesión, de
        modo que la transición se evalúa sobre el estado confirmado. En SQLite
        FOR UPDATE se omite y la exclusión la dan KeyedLock y la columna de
        versión.
        """
        stmt = (
            select(self.model)
            .where(self.model.id == obj_id)  # type: ignore[attr-defined]
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalars().first()


__all__ = ["BaseRepository"]

# Fin del archivo pylinks/shared/database/repository.py
