# -*- coding: utf-8 -*-
"""
pylinks/shared/scheduler/__init__.py

Scheduler de tareas periódicas (APScheduler).
"""

from .scheduler_service import SchedulerService

__all__ = ["SchedulerService"]
