# -*- coding: utf-8 -*-
"""
pylinks/shared/database/base.py

Base declarativa y convención de nombres para modelos ORM.

Este módulo proporciona:
- Base: clase base declarativa de SQLAlchemy
- NAMING_CONVENTION: convención de nombres para constraints
- as_db_enum: helper genérico para mapear enums Python a columnas portables
- UTCDateTime: timestamps siempre timezone-aware en UTC (también en SQLite)
- BigIntPK: BIGINT autoincremental que SQLite también acepta

Autor: PyLinks
Fecha: 2026-10-02
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional, Type

from sqlalchemy import BigInteger, DateTime, Enum as SAEnum, Integer, MetaData
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator

from pylinks.shared.utils.datetime_helpers import ensure_utc

# ===== NAMING CONVENTION =====
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


# ===== BASE DECLARATIVA =====
class Base(DeclarativeBase):
    """
    Base declarativa para todos los modelos ORM de PyLinks.
    Incluye convención de nombres para constraints.
    """
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


# SQLite solo autoincrementa "INTEGER PRIMARY KEY"
BigIntPK = BigInteger().with_variant(Integer, "sqlite")


# ===== TIMESTAMPS UTC =====
class UTCDateTime(TypeDecorator):
    """
    DateTime que siempre entrega datetimes aware en UTC.

    SQLite no guarda zona horaria: se persiste el valor naive en UTC y se
    re-etiqueta al leer. En PostgreSQL se usa TIMESTAMPTZ tal cual.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect: Dialect) -> Optional[datetime]:
        if value is None:
            return None
        value = ensure_utc(value)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value: Optional[datetime], dialect: Dialect) -> Optional[datetime]:
        if value is None:
            return None
        return ensure_utc(value)


# ===== HELPER GENÉRICO PARA ENUMS =====
def as_db_enum(
    enum_cls: Type[Enum],
    name: str | None = None,
    length: int = 32,
) -> SAEnum:
    """
    Devuelve un tipo Enum de SQLAlchemy basado en un Enum de Python.

    Uso típico:

        from pylinks.shared.database.base import Base, as_db_enum
        from .enums import PaymentStatus

        class PaymentRecord(Base):
            status: Mapped[PaymentStatus] = mapped_column(
                as_db_enum(PaymentStatus),
                nullable=False,
            )

    - Se almacena como VARCHAR (native_enum=False) para que el mismo esquema
      funcione en PostgreSQL y en SQLite (tests).
    - Persiste `value` (no `name`) de cada miembro.
    - Si no se pasa `name`, usa `__db_enum_name__` del enum o el nombre
      de la clase en minúsculas.
    """
    enum_name = name or getattr(enum_cls, "__db_enum_name__", enum_cls.__name__.lower())

    def _values(_: object) -> list[str]:
        return [e.value for e in enum_cls]  # type: ignore[arg-type]

    return SAEnum(
        enum_cls,
        name=enum_name,
        native_enum=False,
        create_constraint=False,
        length=length,
        values_callable=_values,
        validate_strings=True,
    )


__all__ = ["Base", "NAMING_CONVENTION", "BigIntPK", "UTCDateTime", "as_db_enum"]

# Fin del archivo pylinks/shared/database/base.py
