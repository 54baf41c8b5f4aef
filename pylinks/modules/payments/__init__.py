# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/__init__.py

Módulo de pagos de PyLinks.

Este módulo gestiona:
- Registros de pago regulares, escrow y de suscripción
- Créditos por sesión y reparto entre destinatarios
- Rastreo de transferencias confirmadas on-chain
- Eventos de webhook firmados hacia los comercios
- Comercios, afiliados y suscripciones

Estructura:
- enums: estados, tipos y transiciones permitidas
- models: modelos ORM
- repositories: acceso a datos
- schemas: validación y serialización Pydantic
- services: lógica de negocio (ledger, escrow, tracker, dispatcher, ...)
- adapters: oráculo de precios y nodo RPC
- routes: API HTTP bajo /api

No reexporta servicios en import-time para evitar ciclos con el
ensamblado de container.py.

Autor: PyLinks
Fecha: 2026-10-02
"""

# Fin del archivo pylinks/modules/payments/__init__.py
