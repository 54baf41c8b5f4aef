
# -*- coding: utf-8 -*-
"""
pylinks/shared/database/__init__.py

Re-exporta utilidades comunes de base de datos.
"""

from __future__ import annotations

from .base import Base, NAMING_CONVENTION, BigIntPK, UTCDateTime, as_db_enum
from .database import (
    build_engine,
    build_session_factory,
    init_models,
    session_scope,
    check_database_health,
)
from .repository import BaseRepository

__all__ = [
    "Base",
    "NAMING_CONVENTION",
    "BigIntPK",
    "UTCDateTime",
    "as_db_enum",
    "build_engine",
    "build_session_factory",
    "init_models",
    "session_scope",
    "check_database_health",
    "BaseRepository",
]
