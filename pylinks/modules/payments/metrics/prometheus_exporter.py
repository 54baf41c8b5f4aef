# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/metrics/prometheus_exporter.py

Exporter Prometheus para el módulo de pagos.

Autor: PyLinks
Fecha: 2026-10-06
"""

import logging

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

logger = logging.getLogger(__name__)

# --------------------------------------------------------------------------
# Registro dedicado (no el global de prometheus_client)
# --------------------------------------------------------------------------
registry = CollectorRegistry()

# --------------------------------------------------------------------------
# Definición de métricas
# --------------------------------------------------------------------------
PAYMENTS_CREATED_TOTAL = Counter(
    "pylinks_payments_created_total",
    "Pagos creados por tipo",
    ["payment_type"],
    registry=registry,
)

PAYMENT_TRANSITIONS_TOTAL = Counter(
    "pylinks_payment_transitions_total",
    "Transiciones de estado aplicadas",
    ["payment_type", "status"],
    registry=registry,
)

TRANSFER_OUTCOMES_TOTAL = Counter(
    "pylinks_transfer_outcomes_total",
    "Resultado de aplicar transferencias confirmadas",
    ["outcome"],  # applied/no_match/expired/duplicate_session/not_pending/orphaned
    registry=registry,
)

WEBHOOK_DELIVERIES_TOTAL = Counter(
    "pylinks_webhook_deliveries_total",
    "Intentos de entrega de webhooks por resultado",
    ["result"],  # delivered/retry/permanently_failed
    registry=registry,
)

WEBHOOK_DELIVERY_SECONDS = Histogram(
    "pylinks_webhook_delivery_seconds",
    "Duración de cada intento de entrega (segundos)",
    registry=registry,
)

ORACLE_FAILURES_TOTAL = Counter(
    "pylinks_oracle_failures_total",
    "Lecturas de precio fallidas",
    ["reason"],  # http/parse/stale/non_positive
    registry=registry,
)

JOB_FAILURES_TOTAL = Counter(
    "pylinks_job_failures_total",
    "Ejecuciones fallidas de jobs programados",
    ["job"],
    registry=registry,
)


# --------------------------------------------------------------------------
# Funciones auxiliares
# --------------------------------------------------------------------------
def render_prometheus_metrics() -> bytes:
    """Genera la salida actual de las métricas en formato Prometheus."""
    return generate_latest(registry)


def observe_payment_created(payment_type: str) -> None:
    PAYMENTS_CREATED_TOTAL.labels(payment_type=payment_type).inc()


def observe_transition(payment_type: str, status: str) -> None:
    PAYMENT_TRANSITIONS_TOTAL.labels(payment_type=payment_type, status=status).inc()
    logger.debug(f"[Prometheus] Transición {payment_type} → {status}")


def observe_transfer_outcome(outcome: str) -> None:
    TRANSFER_OUTCOMES_TOTAL.labels(outcome=outcome).inc()


def observe_webhook_delivery(result: str, duration: float) -> None:
    """
    Args:
        result: delivered/retry/permanently_failed
        duration: segundos del intento HTTP
    """
    WEBHOOK_DELIVERIES_TOTAL.labels(result=result).inc()
    WEBHOOK_DELIVERY_SECONDS.observe(duration)


def observe_oracle_failure(reason: str) -> None:
    ORACLE_FAILURES_TOTAL.labels(reason=reason).inc()


def observe_job_failure(job: str) -> None:
    JOB_FAILURES_TOTAL.labels(job=job).inc()


__all__ = [
    "CONTENT_TYPE_LATEST",
    "registry",
    "render_prometheus_metrics",
    "observe_payment_created",
    "observe_transition",
    "observe_transfer_outcome",
    "observe_webhook_delivery",
    "observe_oracle_failure",
    "observe_job_failure",
]

# Fin del archivo pylinks/modules/payments/metrics/prometheus_exporter.py
