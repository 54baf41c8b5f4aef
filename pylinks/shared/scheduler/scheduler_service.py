# -*- coding: utf-8 -*-
"""
pylinks/shared/scheduler/scheduler_service.py

Scheduler de los barridos periódicos de PyLinks (expiración, auto-release
de escrow, cobro de suscripciones, confirmaciones on-chain y webhooks).

Envuelve un AsyncIOScheduler de APScheduler que corre en el event loop de
la app. Cada app crea su propia instancia desde el lifespan.

Autor: PyLinks
Fecha: 2026-10-05
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger(__name__)


class SchedulerService:
    """
    Registro y ciclo de vida de los jobs por intervalo.

    Los barridos son idempotentes: si un ciclo se atrasa o se pierde, el
    siguiente recoge el trabajo pendiente. Por eso se fusionan ejecuciones
    atrasadas (coalesce) y nunca corren dos ciclos del mismo job a la vez.
    """

    def __init__(self, misfire_grace_seconds: int = 30):
        self._scheduler = AsyncIOScheduler(
            timezone="UTC",
            job_defaults={
                "coalesce": True,
                "max_instances": 1,
                "misfire_grace_time": misfire_grace_seconds,
            },
        )
        self._started = False

    @property
    def is_running(self) -> bool:
        # AsyncIOScheduler.shutdown() se agenda en el event loop; el estado
        # propio cambia en el momento de la llamada
        return self._started

    def start(self) -> None:
        if self._started:
            return
        self._scheduler.start()
        self._started = True
        logger.info(f"[Scheduler] Iniciado con {len(self._scheduler.get_jobs())} jobs")

    def shutdown(self, wait: bool = True) -> None:
        """
        Detiene el scheduler.

        Args:
            wait: Si True, espera a que termine el ciclo en curso de cada job
        """
        if not self._started:
            return
        self._started = False
        self._scheduler.shutdown(wait=wait)
        logger.info("[Scheduler] Detenido")

    def add_interval_job(
        self,
        func: Callable[..., Awaitable[Any]],
        job_id: str,
        seconds: int,
        **kwargs: Any,
    ) -> str:
        """
        Programa `func(**kwargs)` cada `seconds` segundos.

        Un job con el mismo id se reemplaza, de modo que volver a registrar
        los barridos solo cambia su intervalo.
        """
        # Antes de start() APScheduler 3 acumula los jobs pendientes sin aplicar
        # replace_existing
        if self._scheduler.get_job(job_id) is not None:
            self._scheduler.remove_job(job_id)
        self._scheduler.add_job(
            func,
            trigger=IntervalTrigger(seconds=seconds),
            id=job_id,
            name=job_id,
            replace_existing=True,
            kwargs=kwargs,
        )
        logger.info(f"[Scheduler] Job '{job_id}' cada {seconds}s")
        return job_id

    def get_jobs(self) -> List[Dict[str, Any]]:
        """Resumen de los jobs programados (id, intervalo y próxima ejecución)."""
        return [
            {
                "id": job.id,
                "trigger": str(job.trigger),
                # Antes de start() APScheduler 3 no calcula next_run_time
                "next_run": getattr(job, "next_run_time", None),
            }
            for job in self._scheduler.get_jobs()
        ]


__all__ = ["SchedulerService"]

# Fin del archivo pylinks/shared/scheduler/scheduler_service.py
