# -*- coding: utf-8 -*-
"""
pylinks/modules/payments/enums/payment_state_transitions.py

Mapas de transiciones válidas por tipo de pago.

Regular / Subscription:
- created  → paid | expired | cancelled
- paid     → refunded            (reembolso explícito del comercio)
- expired, cancelled, refunded → (terminales)

Escrow:
- created  → escrowed | expired | cancelled
- escrowed → paid | disputed | refunded
- disputed → paid | refunded     (solo resolución manual)
- paid, expired, cancelled, refunded → (terminales)

Autor: PyLinks
Fecha: 2026-10-03
"""

from typing import Dict, Set

from pylinks.modules.payments.errors import InvalidTransition

from .payment_status_enum import PaymentStatus, PaymentType


# Mapa de transiciones válidas: estado_origen → {estados_destino_permitidos}
REGULAR_STATE_TRANSITIONS: Dict[PaymentStatus, Set[PaymentStatus]] = {
    PaymentStatus.CREATED: {
        PaymentStatus.PAID,
        PaymentStatus.EXPIRED,
        PaymentStatus.CANCELLED,
    },
    PaymentStatus.PAID: {
        PaymentStatus.REFUNDED,
    },
    PaymentStatus.EXPIRED: set(),
    PaymentStatus.CANCELLED: set(),
    PaymentStatus.REFUNDED: set(),
}

ESCROW_STATE_TRANSITIONS: Dict[PaymentStatus, Set[PaymentStatus]] = {
    PaymentStatus.CREATED: {
        PaymentStatus.ESCROWED,
        PaymentStatus.EXPIRED,
        PaymentStatus.CANCELLED,
    },
    PaymentStatus.ESCROWED: {
        PaymentStatus.PAID,
        PaymentStatus.DISPUTED,
        PaymentStatus.REFUNDED,
    },
    PaymentStatus.DISPUTED: {
        PaymentStatus.PAID,
        PaymentStatus.REFUNDED,
    },
    PaymentStatus.PAID: set(),
    PaymentStatus.EXPIRED: set(),
    PaymentStatus.CANCELLED: set(),
    PaymentStatus.REFUNDED: set(),
}

VALID_STATE_TRANSITIONS: Dict[PaymentType, Dict[PaymentStatus, Set[PaymentStatus]]] = {
    PaymentType.REGULAR: REGULAR_STATE_TRANSITIONS,
    PaymentType.SUBSCRIPTION: REGULAR_STATE_TRANSITIONS,
    PaymentType.ESCROW: ESCROW_STATE_TRANSITIONS,
}

# Estados donde el ledger puede acreditar fondos recibidos
FUNDED_STATUS: Dict[PaymentType, PaymentStatus] = {
    PaymentType.REGULAR: PaymentStatus.PAID,
    PaymentType.SUBSCRIPTION: PaymentStatus.PAID,
    PaymentType.ESCROW: PaymentStatus.ESCROWED,
}


def get_allowed_transitions(
    payment_type: PaymentType,
    from_state: PaymentStatus,
) -> Set[PaymentStatus]:
    """Estados permitidos como destino desde `from_state`."""
    return VALID_STATE_TRANSITIONS[payment_type].get(from_state, set())


def is_valid_state_transition(
    payment_type: PaymentType,
    from_state: PaymentStatus,
    to_state: PaymentStatus,
) -> bool:
    return to_state in get_allowed_transitions(payment_type, from_state)


def validate_state_transition(
    payment_type: PaymentType,
    from_state: PaymentStatus,
    to_state: PaymentStatus,
) -> None:
    """
    Valida una transición de estado, lanzando excepción si no es válida.

    Raises:
        InvalidTransition: Si la transición no es válida para el tipo de pago.
    """
    if not is_valid_state_transition(payment_type, from_state, to_state):
        allowed = get_allowed_transitions(payment_type, from_state)
        allowed_str = ", ".join(sorted(s.value for s in allowed)) if allowed else "ninguno"
        raise InvalidTransition(
            from_state.value,
            to_state.value,
            f"Transición de estado inválida para pago {payment_type.value}: "
            f"'{from_state.value}' → '{to_state.value}'. "
            f"Transiciones permitidas desde '{from_state.value}': {allowed_str}",
        )


__all__ = [
    "REGULAR_STATE_TRANSITIONS",
    "ESCROW_STATE_TRANSITIONS",
    "VALID_STATE_TRANSITIONS",
    "FUNDED_STATUS",
    "get_allowed_transitions",
    "is_valid_state_transition",
    "validate_state_transition",
]

# Fin del archivo pylinks/modules/payments/enums/payment_state_transitions.py
