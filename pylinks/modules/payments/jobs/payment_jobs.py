# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/jobs/payment_jobs.py

Jobs periódicos del módulo de pagos:
- payments_expiry_sweep: expira pagos created vencidos
- escrow_auto_release: libera escrows con hold_until cumplido
- subscriptions_billing: emite cargos de suscripciones vencidas
- confirmations_poll: rastreo on-chain (solo con ETH_RPC_URL)
- webhooks_dispatch: entrega del outbox

Un fallo en un ciclo se registra y se cuenta; el job sigue programado.

Autor: PyLinks
Fecha: 2026-10-07
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from pylinks.shared.scheduler import SchedulerService
from pylinks.modules.payments.container import PaymentsContainer
from pylinks.modules.payments.metrics import observe_job_failure

logger = logging.getLogger(__name__)


async def run_job(job_name: str, job: Callable[[], Awaitable[Any]]) -> Any:
    """Ejecuta un ciclo de job sin dejar que la excepción detenga al scheduler."""
    try:
        return await job()
    except Exception as e:
        observe_job_failure(job_name)
        logger.error(f"[Scheduler] Job {job_name} falló: {e!r}", exc_info=True)
        return None


def register_payment_jobs(scheduler: SchedulerService, container: PaymentsContainer) -> list[str]:
    """Registra los jobs en el scheduler. Devuelve los ids registrados."""
    settings = container.settings
    jobs: list[tuple[str, Callable[[], Awaitable[Any]], int]] = [
        ("payments_expiry_sweep", container.ledger.expire_overdue, settings.expiry_sweep_interval_seconds),
        ("escrow_auto_release", container.escrow.auto_release_due, settings.escrow_sweep_interval_seconds),
        (
            "subscriptions_billing",
            container.subscriptions.bill_due_subscriptions,
            settings.subscription_sweep_interval_seconds,
        ),
        (
            "webhooks_dispatch",
            container.dispatcher.dispatch_pending,
            settings.webhook_dispatch_interval_seconds,
        ),
    ]
    if container.tracker is not None:
        jobs.append(
            ("confirmations_poll", container.tracker.poll, settings.confirmation_poll_interval_seconds)
        )

    registered = []
    for job_id, func, seconds in jobs:
        scheduler.add_interval_job(run_job, job_id=job_id, seconds=seconds, job_name=job_id, job=func)
        registered.append(job_id)

    logger.info(f"[Scheduler] Jobs de pagos registrados: {', '.join(registered)}")
    return registered


__all__ = ["register_payment_jobs", "run_job"]

# Fin del archivo pylinks/modules/payments/jobs/payment_jobs.py
