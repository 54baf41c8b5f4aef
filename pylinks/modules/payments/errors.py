# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/errors.py

Excepciones de dominio para pagos, escrow y webhooks.

Cada excepción expone un `code` estable y el `http_status` con el que la API
la presenta como {"code", "message"}. Los mensajes nunca incluyen detalles
internos del proveedor (oráculo, RPC).

Autor: PyLinks
Fecha: 2026-10-03
"""


class PyLinksError(Exception):
    """Base de todos los errores de dominio de PyLinks."""

    code = "PYLINKS_ERROR"
    http_status = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidAmount(PyLinksError):
    """Monto que no es un decimal no negativo representable a la precisión dada."""
    code = "INVALID_AMOUNT"
    http_status = 400

    def __init__(self, value, precision: int | None = None, reason: str | None = None):
        self.value = value
        self.precision = precision
        detail = reason or (
            f"no representable con {precision} decimales" if precision is not None else "formato inválido"
        )
        super().__init__(f"Monto inválido '{value}': {detail}")


class InvalidSplits(PyLinksError):
    """Reparto inválido: bps fuera de [0, 10000] o suma mayor a 10000."""
    code = "INVALID_SPLITS"
    http_status = 400

    def __init__(self, message: str):
        super().__init__(message)


class ValidationFailed(PyLinksError):
    """Datos de entrada fuera de los límites del dominio (longitudes, intervalos)."""
    code = "VALIDATION_ERROR"
    http_status = 422

    def __init__(self, message: str):
        super().__init__(message)


class InvalidTransition(PyLinksError):
    """Se lanza cuando se intenta una transición de estado no permitida."""
    code = "INVALID_TRANSITION"
    http_status = 409

    def __init__(self, from_state, to_state, message=None):
        self.from_state = from_state
        self.to_state = to_state
        default_msg = f"Transición inválida: {from_state} → {to_state}"
        super().__init__(message or default_msg)


class InvalidState(PyLinksError):
    """Operación no permitida en el estado actual (p. ej. reembolso fuera de ventana)."""
    code = "INVALID_STATE"
    http_status = 409

    def __init__(self, message: str):
        super().__init__(message)


class PriceUnavailable(PyLinksError):
    """No se pudo obtener un precio válido del oráculo."""
    code = "PRICE_UNAVAILABLE"
    http_status = 503

    def __init__(self, message: str = "Precio del oráculo no disponible"):
        super().__init__(message)


class DisputeUnresolved(PyLinksError):
    """El escrow está en disputa y requiere resolución manual."""
    code = "DISPUTE_UNRESOLVED"
    http_status = 409

    def __init__(self, payment_id):
        self.payment_id = payment_id
        super().__init__(f"El pago {payment_id} tiene una disputa sin resolver")


class DuplicateSession(PyLinksError):
    """sessionId ya usado con otros parámetros o ya acreditado."""
    code = "DUPLICATE_SESSION"
    http_status = 409

    def __init__(self, session_id: str, message: str | None = None):
        self.session_id = session_id
        super().__init__(message or f"La sesión ya existe: {session_id}")


class WebhookDeliveryFailed(PyLinksError):
    """Fallo transitorio de entrega; se reintenta internamente."""
    code = "WEBHOOK_DELIVERY_FAILED"
    http_status = 502

    def __init__(self, event_id, reason: str):
        self.event_id = event_id
        self.reason = reason
        super().__init__(f"Entrega fallida del evento {event_id}: {reason}")


class WebhookPermanentlyFailed(PyLinksError):
    """El evento agotó sus intentos y quedó marcado como fallido."""
    code = "WEBHOOK_PERMANENTLY_FAILED"
    http_status = 409

    def __init__(self, event_id, attempts: int):
        self.event_id = event_id
        self.attempts = attempts
        super().__init__(f"Evento {event_id} fallido tras {attempts} intentos")


# ------------------------------------------------------------------ #
# No encontrados
# ------------------------------------------------------------------ #
class _NotFound(PyLinksError):
    http_status = 404
    entity = "Recurso"

    def __init__(self, identifier):
        self.identifier = identifier
        super().__init__(f"{self.entity} no encontrado: {identifier}")


class PaymentNotFound(_NotFound):
    code = "PAYMENT_NOT_FOUND"
    entity = "Pago"


class MerchantNotFound(_NotFound):
    code = "MERCHANT_NOT_FOUND"
    entity = "Comercio"


class AffiliateNotFound(_NotFound):
    code = "AFFILIATE_NOT_FOUND"
    entity = "Afiliado"


class SubscriptionNotFound(_NotFound):
    code = "SUBSCRIPTION_NOT_FOUND"
    entity = "Suscripción"


class WebhookEventNotFound(_NotFound):
    code = "WEBHOOK_EVENT_NOT_FOUND"
    entity = "Evento de webhook"


# ------------------------------------------------------------------ #
# Acceso
# ------------------------------------------------------------------ #
class NotAuthorized(PyLinksError):
    """Credenciales ausentes/ inválidas (401) o sin permiso sobre el recurso (403)."""
    code = "NOT_AUTHORIZED"

    def __init__(self, message: str, http_status: int = 403):
        self.http_status = http_status
        super().__init__(message)


class Conflict(PyLinksError):
    """Conflicto de unicidad (wallet ya registrada, etc.)."""
    code = "CONFLICT"
    http_status = 409

    def __init__(self, message: str):
        super().__init__(message)


class RateLimited(PyLinksError):
    code = "RATE_LIMITED"
    http_status = 429

    def __init__(self, retry_after: int):
        self.retry_after = retry_after
        super().__init__(f"Demasiadas solicitudes. Reintente en {retry_after} segundos.")


__all__ = [
    "PyLinksError",
    "InvalidAmount",
    "InvalidSplits",
    "ValidationFailed",
    "InvalidTransition",
    "InvalidState",
    "PriceUnavailable",
    "DisputeUnresolved",
    "DuplicateSession",
    "WebhookDeliveryFailed",
    "WebhookPermanentlyFailed",
    "PaymentNotFound",
    "MerchantNotFound",
    "AffiliateNotFound",
    "SubscriptionNotFound",
    "WebhookEventNotFound",
    "NotAuthorized",
    "Conflict",
    "RateLimited",
]

# Fin del archivo pylinks/modules/payments/errors.py
