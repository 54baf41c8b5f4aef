# -*- coding: utf-8 -*-
"""
pylinks/routes/health_routes.py

Endpoints de health check y métricas Prometheus del backend PyLinks.

Autor: PyLinks
Fecha: 2026-10-08
"""

from fastapi import APIRouter, Request, Response

from pylinks.modules.payments.metrics import CONTENT_TYPE_LATEST, render_prometheus_metrics
from pylinks.shared.database import check_database_health
from pylinks.shared.utils.datetime_helpers import to_iso8601, utcnow

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    summary="Health check del backend",
    description="Estado básico del backend, con verificación de conectividad a la base de datos.",
)
async def health_check(request: Request) -> dict:
    """
    Health check básico.

    Returns:
        dict: estado, ambiente, base de datos y scheduler.
    """
    settings = request.app.state.settings
    db_ok = await check_database_health(request.app.state.engine, timeout_s=2.0)
    scheduler = getattr(request.app.state, "scheduler", None)

    return {
        "status": "ok" if db_ok else "degraded",
        "timestamp": to_iso8601(utcnow()),
        "environment": settings.environment,
        "database": {
            "reachable": db_ok,
        },
        "scheduler": {
            "running": bool(scheduler and scheduler.is_running),
            "jobs": [job["id"] for job in scheduler.get_jobs()] if scheduler else [],
        },
        "service": {
            "name": settings.app_name,
        },
    }


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Exposición de métricas en formato texto de Prometheus."""
    return Response(content=render_prometheus_metrics(), media_type=CONTENT_TYPE_LATEST)

# Fin del archivo pylinks/routes/health_routes.py
