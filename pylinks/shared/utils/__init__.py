# -*- coding: utf-8 -*-
"""
pylinks/shared/utils/__init__.py

Utilidades compartidas (tiempo, locks).
"""

from .datetime_helpers import Clock, utcnow, ensure_utc, to_iso8601
from .keyed_lock import KeyedLock

__all__ = ["Clock", "utcnow", "ensure_utc", "to_iso8601", "KeyedLock"]
