# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/jobs/__init__.py
"""

from .payment_jobs import register_payment_jobs, run_job

__all__ = ["register_payment_jobs", "run_job"]
