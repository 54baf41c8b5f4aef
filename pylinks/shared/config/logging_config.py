# -*- coding: utf-8 -*-
"""
pylinks/shared/config/logging_config.py

Logging de PyLinks vía logging.config.dictConfig.

Formatos (LOG_FORMAT):
- plain:  una línea por evento, para contenedores y CI
- pretty: columnas alineadas, para desarrollo local
- json:   python-json-logger, para agregadores de logs en producción

Los módulos usan `logging.getLogger(__name__)` y prefijan el componente en
el mensaje ([Ledger], [Escrow], [Tracker], [Webhook], ...).

Autor: PyLinks
Fecha: 2026-10-02
"""

import logging.config
from typing import Any, Dict, Literal

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["plain", "pretty", "json"]

# Librerías que en INFO escriben una línea por job o por request saliente
NOISY_LOGGERS = ("apscheduler", "httpx", "httpcore", "aiosqlite")

_FORMATTERS: Dict[str, Dict[str, Any]] = {
    "plain": {"format": "%(asctime)s %(levelname)s [%(name)s]: %(message)s"},
    "pretty": {
        "format": "%(asctime)s | %(levelname)-8s | %(name)-45s | %(message)s",
        "datefmt": "%H:%M:%S",
    },
    "json": {
        "()": "pythonjsonlogger.json.JsonFormatter",
        "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
    },
}


def build_logging_config(level: LogLevel = "INFO", fmt: LogFormat = "plain") -> Dict[str, Any]:
    """Diccionario para dictConfig con un único handler a stdout."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {fmt: _FORMATTERS[fmt]},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": fmt,
                "stream": "ext://sys.stdout",
            }
        },
        "loggers": {name: {"level": "WARNING"} for name in NOISY_LOGGERS},
        "root": {"handlers": ["console"], "level": level.upper()},
    }


def setup_logging(level: LogLevel = "INFO", fmt: LogFormat = "plain") -> None:
    """
    Aplica la configuración de logging al proceso.

    Se llama una vez desde `pylinks.main.run()`; create_app() no la toca
    para no pisar la captura de logs de pytest.

    Ejemplos:
        >>> setup_logging("INFO", "plain")
        >>> setup_logging("WARNING", "json")
    """
    logging.config.dictConfig(build_logging_config(level, fmt))


__all__ = ["setup_logging", "build_logging_config", "NOISY_LOGGERS"]

# Fin del archivo pylinks/shared/config/logging_config.py
