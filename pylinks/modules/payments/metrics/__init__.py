# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/metrics/__init__.py

Métricas Prometheus del módulo de pagos.
"""

from .prometheus_exporter import (
    CONTENT_TYPE_LATEST,
    registry,
    render_prometheus_metrics,
    observe_payment_created,
    observe_transition,
    observe_transfer_outcome,
    observe_webhook_delivery,
    observe_oracle_failure,
    observe_job_failure,
)

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
