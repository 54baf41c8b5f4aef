# -*- coding: utf-8 -*-
"""
pylinks/shared/config/settings_pylinks.py

Configuración del backend de PyLinks.

Descripción:
    Centraliza tiempos de expiración de sesiones, confirmaciones de bloque,
    política de reintentos de webhooks, rate limiting, escrow, oráculo de
    precios y nodo RPC. Todo se lee del entorno (o de .env).

    Los componentes NO leen esta configuración de forma global: la instancia
    se construye en el borde (main.py) y se pasa explícitamente a cada
    servicio en su constructor.

Autor: PyLinks
Fecha: 2026-10-02
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PyLinksSettings(BaseSettings):
    """Configuración del sistema de pagos PyLinks."""

    # =========================================================================
    # APLICACIÓN
    # =========================================================================

    app_name: str = Field(default="PyLinks Backend")

    environment: str = Field(
        default="development",
        description="development / test / production",
    )

    database_url: str = Field(
        default="sqlite+aiosqlite:///./pylinks.db",
        description="DSN async de SQLAlchemy (postgresql+asyncpg://... en producción)",
    )

    db_echo_sql: bool = Field(default=False)

    db_auto_create: bool = Field(
        default=True,
        description="Crea las tablas al arrancar (solo desarrollo / SQLite)",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")

    log_format: Literal["plain", "pretty", "json"] = Field(default="plain")

    host: str = Field(default="0.0.0.0")

    port: int = Field(default=8000, ge=1, le=65535)

    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:19006",
        description="Orígenes CORS separados por coma",
    )

    # =========================================================================
    # SESIONES DE PAGO
    # =========================================================================

    session_expiry_minutes: int = Field(
        default=30,
        ge=1,
        description="Expiración de sesiones de pago (SESSION_EXPIRY_MINUTES)",
    )

    regular_payment_hard_expiry_minutes: int = Field(
        default=10,
        ge=1,
        description="Tope fijo de expiración para pagos regulares (regla de producto)",
    )

    max_description_length: int = Field(default=500, ge=1)

    refund_window_days: int = Field(
        default=30,
        ge=0,
        description="Ventana para reembolsos iniciados por el comercio",
    )

    platform_fee_bps: int = Field(
        default=0,
        ge=0,
        le=10_000,
        description="Comisión de plataforma en basis points (0 = sin comisión)",
    )

    treasury_address: str = Field(
        default="0x5b17c05bf59D82266e29C0Ca86aa1359F9cE801A",
        description="Receptor de la comisión de plataforma",
    )

    # =========================================================================
    # BLOCKCHAIN
    # =========================================================================

    block_confirmation_count: int = Field(
        default=2,
        ge=0,
        description="Confirmaciones adicionales antes de aceptar una transferencia",
    )

    eth_rpc_url: Optional[str] = Field(
        default=None,
        description="Nodo JSON-RPC (Sepolia). Sin URL no se programa el polling",
    )

    pyusd_contract: str = Field(
        default="0xCaC524BcA292aaade2DF8A05cC58F0a65B1B3bB9",
        description="Contrato ERC-20 de PYUSD (Sepolia)",
    )

    token_decimals: int = Field(default=6, ge=0)

    transfer_scan_window_blocks: int = Field(
        default=1000,
        ge=1,
        description="Bloques hacia atrás a escanear en el primer poll",
    )

    escrow_address: Optional[str] = Field(
        default=None,
        description="Dirección que retiene fondos de escrow (si None, el comercio)",
    )

    escrow_hold_days: int = Field(default=7, ge=0)

    # =========================================================================
    # ORÁCULO DE PRECIOS
    # =========================================================================

    usd_decimals: int = Field(default=8, ge=0)

    price_oracle_url: str = Field(default="https://hermes.pyth.network")

    pyusd_price_feed_id: str = Field(
        default="0xc1da1b73d7f01e7ddd54b3766cf7fcd644395ad14f70aa706ec5384c59e76692",
        description="Feed id de Pyth para PYUSD/USD",
    )

    price_max_age_seconds: int = Field(
        default=300,
        ge=1,
        description="Antigüedad máxima aceptada para un precio publicado",
    )

    price_oracle_fixed_price: Optional[str] = Field(
        default=None,
        description="Precio fijo en USD (p. ej. '1.00') para testnet; desactiva Pyth",
    )

    # =========================================================================
    # WEBHOOKS
    # =========================================================================

    webhook_secret: str = Field(
        default="pylinks-webhook-signing-secret",
        description="Secreto de firma por defecto si el comercio no tiene uno propio",
    )

    webhook_retry_count: int = Field(
        default=3,
        ge=1,
        description="Intentos máximos de entrega (WEBHOOK_RETRY_COUNT)",
    )

    webhook_timeout_ms: int = Field(
        default=5000,
        ge=1,
        description="Timeout por intento para toda llamada HTTP saliente",
    )

    webhook_backoff_base_seconds: float = Field(default=1.0, gt=0)

    webhook_backoff_max_seconds: float = Field(default=300.0, gt=0)

    webhook_dispatch_batch_size: int = Field(default=50, ge=1)

    # =========================================================================
    # RATE LIMITING
    # =========================================================================

    rate_limit_enabled: bool = Field(default=True)

    rate_limit_window_ms: int = Field(default=900_000, ge=1)

    rate_limit_max_requests: int = Field(default=100, ge=1)

    # Toma la IP de X-Forwarded-For; solo detrás de un proxy propio
    rate_limit_trust_proxy: bool = Field(default=False)

    # =========================================================================
    # SEGURIDAD
    # =========================================================================

    arbiter_api_key: Optional[str] = Field(
        default=None,
        description="Clave del árbitro de la plataforma para resolver disputas",
    )

    referral_code_length: int = Field(default=8, ge=4, le=32)

    # =========================================================================
    # SCHEDULER
    # =========================================================================

    scheduler_enabled: bool = Field(default=True)

    expiry_sweep_interval_seconds: int = Field(default=60, ge=1)

    escrow_sweep_interval_seconds: int = Field(default=300, ge=1)

    subscription_sweep_interval_seconds: int = Field(default=300, ge=1)

    confirmation_poll_interval_seconds: int = Field(default=15, ge=1)

    webhook_dispatch_interval_seconds: int = Field(default=10, ge=1)

    @field_validator("eth_rpc_url", "escrow_address", "arbiter_api_key", "price_oracle_fixed_price", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Variables de entorno vacías equivalen a no configuradas."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    # =========================================================================
    # DERIVADOS
    # =========================================================================

    @property
    def outbound_timeout_seconds(self) -> float:
        """Timeout de llamadas salientes (webhook, oráculo, RPC) en segundos."""
        return self.webhook_timeout_ms / 1000.0

    @property
    def rate_limit_window_seconds(self) -> float:
        return self.rate_limit_window_ms / 1000.0

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# Singleton del borde de la aplicación (main.py / CLI)
_settings: Optional[PyLinksSettings] = None


def get_settings() -> PyLinksSettings:
    """
    Obtiene la instancia de configuración del proceso.

    Solo debe usarse en el borde de la aplicación; los servicios reciben
    la configuración por constructor.
    """
    global _settings
    if _settings is None:
        _settings = PyLinksSettings()
    return _settings


def reset_settings() -> None:
    """Descarta la instancia cacheada (útil para tests)."""
    global _settings
    _settings = None


__all__ = [
    "PyLinksSettings",
    "get_settings",
    "reset_settings",
]
# Fin del archivo pylinks/shared/config/settings_pylinks.py
