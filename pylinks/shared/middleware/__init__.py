# -*- coding: utf-8 -*-
"""
pylinks/shared/middleware/__init__.py

Middlewares y manejadores de error compartidos.
"""

from .exception_handler import (
    JSONExceptionMiddleware,
    error_response,
    get_request_id,
    register_exception_handlers,
)

__all__ = [
    "JSONExceptionMiddleware",
    "error_response",
    "get_request_id",
    "register_exception_handlers",
]
