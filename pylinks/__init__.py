# -*- coding: utf-8 -*-
"""
pylinks/__init__.py

Paquete principal del backend PyLinks: enlaces de pago PYUSD con escrow,
suscripciones, afiliados y notificación por webhooks.
"""

__version__ = "1.0.0"
