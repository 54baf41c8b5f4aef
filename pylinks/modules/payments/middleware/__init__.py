# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/middleware/__init__.py
"""

from .rate_limiter import SlidingWindowRateLimiter, check_rate_limit

__all__ = ["SlidingWindowRateLimiter", "check_rate_limit"]
