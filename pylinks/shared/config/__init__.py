# -*- coding: utf-8 -*-
"""
pylinks/shared/config/__init__.py

Punto único de acceso a la configuración:
    from pylinks.shared.config import PyLinksSettings, get_settings

Autor: PyLinks
Fecha: 2026-10-02
"""

from .settings_pylinks import PyLinksSettings, get_settings, reset_settings
from .logging_config import setup_logging

__all__ = [
    "PyLinksSettings",
    "get_settings",
    "reset_settings",
    "setup_logging",
]
