# -*- coding: utf-8 -*-
"""
pylinks/shared/utils/datetime_helpers.py

Tiempo de PyLinks: todo instante es aware y en UTC.

Los plazos del sistema (expiración de sesiones, retención de escrow,
ventana de reembolso, backoff de webhooks, próximo cobro de suscripción)
se calculan con el reloj inyectable `Clock`, que los tests congelan.

Autor: PyLinks
Fecha: 2026-10-02
"""

from datetime import datetime, timezone
from typing import Callable, Optional

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Reloj por defecto de los servicios."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """
    Normaliza a UTC aware. Un valor naive se interpreta como UTC
    (así lo devuelve SQLite).

        >>> ensure_utc(datetime(2026, 10, 2, 12, 0)).tzinfo is timezone.utc
        True
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso8601(dt: Optional[datetime]) -> Optional[str]:
    """
    ISO 8601 con sufijo 'Z'.

        >>> to_iso8601(datetime(2026, 10, 2, 12, 0, tzinfo=timezone.utc))
        '2026-10-02T12:00:00Z'
    """
    if dt is None:
        return None
    return ensure_utc(dt).isoformat().replace("+00:00", "Z")


__all__ = ["Clock", "utcnow", "ensure_utc", "to_iso8601"]

# Fin del archivo pylinks/shared/utils/datetime_helpers.py
