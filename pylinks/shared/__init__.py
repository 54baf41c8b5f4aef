# -*- coding: utf-8 -*-
"""
pylinks/shared/__init__.py

Infraestructura compartida: configuración, base de datos, middleware,
scheduler y utilidades.
"""
