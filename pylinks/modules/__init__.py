# -*- coding: utf-8 -*-
"""
pylinks/modules/__init__.py

Módulos de dominio del backend.
"""
