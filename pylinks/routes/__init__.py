# -*- coding: utf-8 -*-
"""
pylinks/routes/__init__.py

Rutas de plataforma (health y métricas).
"""

from .health_routes import router as health_router

__all__ = ["health_router"]
