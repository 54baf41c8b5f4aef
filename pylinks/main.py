# -*- coding: utf-8 -*-
"""
pylinks/main.py

Punto de entrada del backend PyLinks.

Ajustes clave:
- create_app(settings) construye la app sin estado global: engine, cliente
  HTTP, servicios y scheduler viven en app.state y se liberan en el shutdown
- Scheduler con los jobs de pagos (expiración, auto-release, suscripciones,
  confirmaciones y entrega de webhooks)
- /health y /metrics fuera del prefijo /api (sin rate limiting)
- run() carga .env, configura logging y levanta uvicorn

Autor: PyLinks
Fecha: 2026-10-08
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

import anyio
import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pylinks.modules.payments.adapters import PriceOracle, TransferSource
from pylinks.modules.payments.container import build_container
from pylinks.modules.payments.jobs import register_payment_jobs
from pylinks.modules.payments.routes import api_router, register_payment_error_handlers
from pylinks.routes import health_router
from pylinks.shared.config import PyLinksSettings, get_settings, setup_logging
from pylinks.shared.database import build_engine, build_session_factory, init_models
from pylinks.shared.middleware import JSONExceptionMiddleware, register_exception_handlers
from pylinks.shared.scheduler import SchedulerService
from pylinks.shared.utils.datetime_helpers import Clock, utcnow

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "merchants", "description": "Registro de comercios, API keys y webhook"},
    {"name": "payments", "description": "Pagos regulares, cancelación y reembolso"},
    {"name": "escrow", "description": "Pagos en custodia, disputas y liquidación"},
    {"name": "subscriptions", "description": "Cobros recurrentes"},
    {"name": "affiliates", "description": "Programa de referidos"},
    {"name": "webhooks", "description": "Eventos fallidos y re-entrega"},
    {"name": "health", "description": "Estado del servicio"},
]


def create_app(
    settings: Optional[PyLinksSettings] = None,
    *,
    clock: Clock = utcnow,
    http_client: Optional[httpx.AsyncClient] = None,
    price_oracle: Optional[PriceOracle] = None,
    transfer_source: Optional[TransferSource] = None,
) -> FastAPI:
    """
    Construye la aplicación FastAPI.

    Args:
        settings: configuración; por defecto la del proceso (entorno / .env)
        clock: reloj inyectable para todos los servicios
        http_client: cliente saliente propio; si se pasa, no se cierra aquí
        price_oracle: oráculo alternativo (tests / testnet)
        transfer_source: fuente de transferencias alternativa

    Returns:
        FastAPI lista para servir; los servicios existen tras el startup.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # ────────── STARTUP ──────────
        engine = build_engine(settings.database_url, echo=settings.db_echo_sql)
        if settings.db_auto_create:
            await init_models(engine)
        session_factory = build_session_factory(engine)

        owns_client = http_client is None
        client = http_client or httpx.AsyncClient(timeout=settings.outbound_timeout_seconds)

        container = build_container(
            settings,
            session_factory,
            http_client=client,
            clock=clock,
            price_oracle=price_oracle,
            transfer_source=transfer_source,
        )
        app.state.engine = engine
        app.state.container = container

        scheduler: Optional[SchedulerService] = None
        if settings.scheduler_enabled:
            scheduler = SchedulerService()
            job_ids = register_payment_jobs(scheduler, container)
            scheduler.start()
            logger.info(f"⏰ Scheduler iniciado con {len(job_ids)} jobs: {', '.join(job_ids)}")
        else:
            logger.info("⏰ Scheduler deshabilitado (SCHEDULER_ENABLED=false)")
        app.state.scheduler = scheduler

        logger.info(f"🟢 {settings.app_name} iniciado ({settings.environment})")
        try:
            yield
        finally:
            # ────────── SHUTDOWN ──────────
            logger.info("🔴 Iniciando shutdown ordenado...")
            with anyio.CancelScope(shield=True):
                if scheduler is not None:
                    scheduler.shutdown(wait=True)
                if owns_client:
                    await client.aclose()
                await engine.dispose()
            logger.info(f"🔴 {settings.app_name} apagado.")

    app = FastAPI(
        title="PyLinks API",
        description="Enlaces de pago PYUSD: pagos, escrow, suscripciones y webhooks",
        version="1.0.0",
        lifespan=lifespan,
        openapi_tags=openapi_tags,
    )
    app.state.settings = settings

    app.add_middleware(JSONExceptionMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    register_payment_error_handlers(app)

    app.include_router(health_router)
    app.include_router(api_router)

    logger.debug(f"[API] CORS allow_origins={settings.cors_origins}")
    return app


def run() -> None:
    """Arranque por consola: `pylinks` o `python -m pylinks.main`."""
    from dotenv import load_dotenv
    import uvicorn

    load_dotenv(override=False)
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    uvicorn.run(
        "pylinks.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()

# Fin del archivo pylinks/main.py
