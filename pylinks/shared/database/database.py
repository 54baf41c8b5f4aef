# -*- coding: utf-8 -*-
"""
pylinks/shared/database/database.py

Engine y fábrica de sesiones async de SQLAlchemy.

Provee:
- build_engine(database_url): create_async_engine (asyncpg en producción,
  aiosqlite en desarrollo/tests)
- build_session_factory(engine): async_sessionmaker sin expire_on_commit
- init_models(engine): create_all (solo desarrollo / tests)
- session_scope(factory): context manager que cierra la sesión y desasocia
  los objetos devueltos
- check_database_health(engine)

A diferencia de un engine global, aquí todo se construye a partir de la
configuración que recibe main.py, de modo que los tests pueden levantar un
engine por caso.

Autor: PyLinks
Fecha: 2026-10-02
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from pylinks.shared.database.base import Base

logger = logging.getLogger(__name__)


def build_engine(database_url: str, *, echo: bool = False) -> AsyncEngine:
    """Crea el engine async para el DSN configurado."""
    kwargs: dict = {"echo": echo}
    if database_url.startswith("sqlite"):
        # Las escrituras concurrentes esperan el lock en lugar de fallar de inmediato
        kwargs["connect_args"] = {"timeout": 30}
    else:
        kwargs["pool_pre_ping"] = True

    engine = create_async_engine(database_url, **kwargs)
    logger.info(f"[DB] Engine creado ({engine.dialect.name}, echo={echo})")
    return engine


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Fábrica de sesiones; los objetos siguen legibles tras el commit."""
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
        class_=AsyncSession,
        autoflush=False,
    )


async def init_models(engine: AsyncEngine) -> None:
    """Crea todas las tablas registradas en Base.metadata."""
    # Importa los modelos para registrarlos en el metadata
    import pylinks.modules.payments.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("[DB] Esquema verificado (create_all)")


@asynccontextmanager
async def session_scope(factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    """
    Abre una sesión; el commit queda a cargo de quien usa el scope.

    Al salir se cierra la sesión sin rollback explícito: los objetos
    devueltos quedan desasociados con su estado cargado, legibles fuera del
    scope. Una transacción sin commit se descarta al liberar la conexión.
    """
    session = factory()
    try:
        yield session
    finally:
        await session.close()


async def check_database_health(engine: AsyncEngine, timeout_s: float = 3.0) -> bool:
    """
    Verifica conectividad a la base de datos.

    Returns:
        True si SELECT 1 responde dentro del timeout, False en caso contrario
    """
    try:
        async with asyncio.timeout(timeout_s):
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:  # errores de driver heterogéneos (asyncpg, aiosqlite)
        logger.warning(f"[DB] Health check falló: {e!r}")
        return False


__all__ = [
    "build_engine",
    "build_session_factory",
    "init_models",
    "session_scope",
    "check_database_health",
]
# Fin del archivo pylinks/shared/database/database.py
